"""
Peechi - community bot for an engineering Discord server.

Core Components:

- **Points**: Members earn points for substantive, non-repetitive chat messages.
  Messages are normalised, scored by length and checked against the member's
  recent history with a bigram similarity test before the award is written.
- **Reports**: A "Report Message" context menu opens a short-lived pending report;
  a category button files it with staff.
- **Verification**: New members pick a name and pronouns in a modal and receive
  the verified role.
- **Calendar sync**: Upcoming Google Calendar events are mirrored as guild
  scheduled events.
- **Routing**: A single interaction router dispatches slash commands, context
  menus and buttons and turns handler errors into one ephemeral reply.
"""
