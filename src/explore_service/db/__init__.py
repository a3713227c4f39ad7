"""
explore_service.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the decision ORM model, engine/session setup, and the decision ledger.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The ledger targets PostgreSQL in production and SQLite for local dev/tests; both
# dialects support the native upsert the ledger relies on.
