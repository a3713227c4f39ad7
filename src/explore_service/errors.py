"""
explore_service.errors

Error taxonomy shared by the ledger, the service layer and the API.

Responsibilities:
- Separate caller mistakes (invalid arguments) from store failures.
- Keep the original store exception chained for logs, never exposed as its own kind.
"""

from __future__ import annotations


class ExploreError(Exception):
    pass


class InvalidArgumentError(ExploreError):
    """Request failed validation; no store access was attempted."""


class StorageError(ExploreError):
    """The decision store rejected or failed a statement."""


class InternalError(ExploreError):
    """Opaque failure surfaced to callers when the store fails."""


# --- Module Notes -----------------------------------------------------------
# "No decision for this pair" is not an error; see `DecisionLookup` in the ledger.
