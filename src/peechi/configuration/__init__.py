"""
Configuration management for Peechi.

- **app_configuration.py**: YAML loader for operational knobs (database path,
  points kill-switch, report TTLs, modal timeouts, presence text). Falls back to
  defaults on a missing or malformed file.

- **bot_settings.py**: Local environment (token, guild and client ids, calendar
  credentials) plus role and channel ids fetched from the ``config`` table, with
  ``reload()`` for /recache.
"""
