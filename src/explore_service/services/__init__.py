"""
explore_service.services

Service-layer package.

Responsibilities:
- Validate requests and orchestrate calls into the decision ledger.
- Map ledger failures into caller-facing error categories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake sessions/repos.
