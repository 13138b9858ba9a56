"""
Moderation reports.

- **report_registry.py**: In-memory pending reports with a TTL, a periodic sweep
  and a size cap that evicts the oldest half.

- **report_resolution.py**: Report categories, button id encoding and the
  consume-on-resolve step.
"""
