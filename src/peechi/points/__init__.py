"""
Point scoring and the user ledger.

- **scoring.py**: Message normalisation, length-tier scoring, spam heuristics and
  bigram similarity used for duplicate detection. Pure functions.

- **ledger.py**: Persistent user records. Point awards read and write inside one
  serialised transaction so concurrent awards for a user are never lost.
"""
