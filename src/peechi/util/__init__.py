"""
Utility functions and helpers for Peechi.

- **logger.py**: Centralized logging configuration with colored console output,
  rotating file handlers, per-session log aggregation and the alert queue handler
  that feeds ERROR records to the error channel. Uses prompt_toolkit for
  non-blocking console I/O.
"""
