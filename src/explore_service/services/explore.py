"""
explore_service.services.explore

Request orchestration for the explore API.

Responsibilities:
- Validate inbound requests before any store access.
- Pick the first-to-like or reciprocal branch when recording a decision.
- Shape paginated listings (projection + next-token derivation).
- Translate ledger storage failures into opaque internal errors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from explore_service.db.repositories.decisions import DecisionRepo, Liker
from explore_service.errors import InternalError, InvalidArgumentError, StorageError
from explore_service.observability.logging import get_logger
from explore_service.settings import Settings

log = get_logger(__name__)

_UINT64_MAX = 2**64 - 1
_DECIMAL = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class LikerView:
    actor_id: str
    updated_at: int  # unix seconds


@dataclass(frozen=True, slots=True)
class LikedYouPage:
    likers: list[LikerView] = field(default_factory=list)
    next_pagination_token: str | None = None


class ExploreService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._settings = settings
        self._decisions = DecisionRepo(session)

    async def list_liked_you(
        self,
        *,
        recipient_user_id: str,
        pagination_token: str | None = None,
        pagination_limit: int | None = None,
    ) -> LikedYouPage:
        cursor = _validate_list_request(recipient_user_id, pagination_token)
        limit = self._effective_limit(pagination_limit)
        try:
            likers = await self._decisions.get_liked_decisions(
                recipient_user_id, True, cursor=cursor, limit=limit
            )
        except StorageError as e:
            log.exception("ledger_call_failed", operation="get_liked_decisions")
            raise InternalError(f"failed to get recipient likes, {e}") from e
        return _page(likers, limit=limit)

    async def list_new_liked_you(
        self,
        *,
        recipient_user_id: str,
        pagination_token: str | None = None,
        pagination_limit: int | None = None,
    ) -> LikedYouPage:
        cursor = _validate_list_request(recipient_user_id, pagination_token)
        limit = self._effective_limit(pagination_limit)
        try:
            likers = await self._decisions.get_new_liked_decisions(
                recipient_user_id, True, cursor=cursor, limit=limit
            )
        except StorageError as e:
            log.exception("ledger_call_failed", operation="get_new_liked_decisions")
            raise InternalError(f"failed to get new recipient likes, {e}") from e
        return _page(likers, limit=limit)

    async def count_liked_you(self, *, recipient_user_id: str) -> int:
        if not recipient_user_id:
            raise InvalidArgumentError("empty recipient ID")
        try:
            return await self._decisions.get_liked_decisions_count(recipient_user_id, True)
        except StorageError as e:
            log.exception("ledger_call_failed", operation="get_liked_decisions_count")
            raise InternalError(f"failed to get recipient liked count, {e}") from e

    async def put_decision(
        self,
        *,
        recipient_user_id: str,
        actor_user_id: str,
        liked_recipient: bool,
    ) -> bool:
        """
        Record `actor_user_id`'s decision about `recipient_user_id`.

        Returns True when both sides have now made the same decision. The probe and
        the write are two steps; concurrent first decisions from both sides of a pair
        can both take the first-to-like branch. `lock_probe_row` only serializes
        callers once the counterpart row exists.
        """

        if not recipient_user_id:
            raise InvalidArgumentError("empty recipient ID")
        if not actor_user_id:
            raise InvalidArgumentError("empty actor ID")

        # Has the recipient already decided about the actor?
        try:
            counterpart = await self._decisions.get_liked_decision(
                actor_user_id, recipient_user_id, for_update=self._settings.lock_probe_row
            )
        except StorageError as e:
            log.exception("ledger_call_failed", operation="get_liked_decision")
            raise InternalError(f"failed to determine mutual decision, {e}") from e

        if not counterpart.found:
            try:
                await self._decisions.put_decision(
                    recipient_id=recipient_user_id,
                    actor_id=actor_user_id,
                    liked=liked_recipient,
                )
            except StorageError as e:
                log.exception("ledger_call_failed", operation="put_decision")
                raise InternalError(f"failed to update decision, {e}") from e
            log.info("decision_recorded", recipient_id=recipient_user_id, actor_id=actor_user_id)
            return False

        recipient_liked = counterpart.liked
        try:
            await self._decisions.put_mutual_decisions(
                recipient_id=recipient_user_id,
                actor_id=actor_user_id,
                actor_liked=liked_recipient,
                recipient_liked=recipient_liked,
            )
        except StorageError as e:
            log.exception("ledger_call_failed", operation="put_mutual_decisions")
            raise InternalError(f"failed to update mutual decision, {e}") from e

        mutual = recipient_liked == liked_recipient
        log.info(
            "mutual_decision_recorded",
            recipient_id=recipient_user_id,
            actor_id=actor_user_id,
            mutual_likes=mutual,
        )
        return mutual

    def _effective_limit(self, pagination_limit: int | None) -> int | None:
        if pagination_limit is not None:
            return pagination_limit
        return self._settings.default_page_limit


def parse_pagination_token(token: str) -> int:
    # Tokens are unsigned 64-bit decimals: digits only, no sign or whitespace.
    if not token:
        raise InvalidArgumentError("empty pagination token")
    if _DECIMAL.fullmatch(token) is None or int(token) > _UINT64_MAX:
        raise InvalidArgumentError(f"invalid pagination token: {token!r}")
    return int(token)


def _validate_list_request(recipient_user_id: str, pagination_token: str | None) -> int | None:
    if not recipient_user_id:
        raise InvalidArgumentError("empty recipient ID")
    if pagination_token is None:
        return None
    return parse_pagination_token(pagination_token)


def _page(likers: list[Liker], *, limit: int | None) -> LikedYouPage:
    views = [
        LikerView(actor_id=liker.actor_id, updated_at=_unix_seconds(liker.updated_at))
        for liker in likers
    ]
    # Only bounded requests continue; an empty page ends the stream.
    next_token = str(likers[-1].id) if limit is not None and likers else None
    return LikedYouPage(likers=views, next_pagination_token=next_token)


def _unix_seconds(ts: datetime) -> int:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return int(ts.timestamp())


# --- Module Notes -----------------------------------------------------------
# The service holds no state between calls; the request-scoped session is the only
# resource it touches, and the ledger owns commit/rollback for writes.
