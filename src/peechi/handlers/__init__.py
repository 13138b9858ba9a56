"""
Interaction handlers for Peechi.

- **commands/**: Slash commands (/ping, /points, /verify, /recache, /fail,
  /calendar-sync). Each module exposes its command payload and a coroutine.
- **context_menus/**: The "Report Message" message context menu.
- **buttons/**: Handlers for ``report/...`` and ``verify/...`` button ids.
- **handler_table.py**: The explicit registration table wired at startup.
"""
