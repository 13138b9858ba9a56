"""
Interaction routing for Peechi.

- **handler_registry.py**: Lookup tables for slash commands, context menus and
  button prefixes, plus the command catalogue published at startup.

- **router.py**: Classifies inbound interactions, invokes the matching handler
  and translates handler exceptions into a single ephemeral reply.
"""
