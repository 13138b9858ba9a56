"""
Google Calendar integration.

- **calendar_service.py**: Events-list client for the Calendar v3 REST API.
- **calendar_datatypes.py**: Event records and validation into scheduled-event fields.
- **calendar_sync.py**: Reconciliation of calendar events with tagged guild events.
"""
