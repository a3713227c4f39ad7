"""
explore_service.api.routers.explore

Explore endpoints: who liked a recipient, and recording decisions.

Responsibilities:
- Parse camelCase JSON bodies into typed requests.
- Delegate to `ExploreService`.
- Map error categories to HTTP status codes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from explore_service.api.deps import explore_service_dep
from explore_service.errors import InternalError, InvalidArgumentError
from explore_service.services.explore import ExploreService, LikedYouPage

router = APIRouter(prefix="/v1/explore", tags=["explore"])

_UINT32_MAX = 2**32 - 1


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListLikedYouRequest(_CamelModel):
    recipient_user_id: str
    pagination_token: str | None = None
    pagination_limit: int | None = Field(default=None, ge=0, le=_UINT32_MAX)


class LikerResponse(_CamelModel):
    actor_id: str
    updated_at: int


class ListLikedYouResponse(_CamelModel):
    likers: list[LikerResponse]
    next_pagination_token: str | None = None


class CountLikedYouRequest(_CamelModel):
    recipient_user_id: str


class CountLikedYouResponse(_CamelModel):
    count: int


class PutDecisionRequest(_CamelModel):
    recipient_user_id: str
    actor_user_id: str
    liked_recipient: bool = False


class PutDecisionResponse(_CamelModel):
    mutual_likes: bool


@contextmanager
def _error_mapping() -> Iterator[None]:
    try:
        yield
    except InvalidArgumentError as e:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_ARGUMENT", "message": str(e)},
        ) from e
    except InternalError as e:
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "INTERNAL", "message": str(e)},
        ) from e


def _list_response(page: LikedYouPage) -> ListLikedYouResponse:
    return ListLikedYouResponse(
        likers=[LikerResponse(actor_id=v.actor_id, updated_at=v.updated_at) for v in page.likers],
        next_pagination_token=page.next_pagination_token,
    )


@router.post(
    "/list-liked-you",
    response_model=ListLikedYouResponse,
    response_model_exclude_none=True,
)
async def list_liked_you(
    body: ListLikedYouRequest,
    svc: ExploreService = Depends(explore_service_dep),
) -> ListLikedYouResponse:
    with _error_mapping():
        page = await svc.list_liked_you(
            recipient_user_id=body.recipient_user_id,
            pagination_token=body.pagination_token,
            pagination_limit=body.pagination_limit,
        )
    return _list_response(page)


@router.post(
    "/list-new-liked-you",
    response_model=ListLikedYouResponse,
    response_model_exclude_none=True,
)
async def list_new_liked_you(
    body: ListLikedYouRequest,
    svc: ExploreService = Depends(explore_service_dep),
) -> ListLikedYouResponse:
    # Same shape as list-liked-you, restricted to likes not yet reciprocated.
    with _error_mapping():
        page = await svc.list_new_liked_you(
            recipient_user_id=body.recipient_user_id,
            pagination_token=body.pagination_token,
            pagination_limit=body.pagination_limit,
        )
    return _list_response(page)


@router.post("/count-liked-you", response_model=CountLikedYouResponse)
async def count_liked_you(
    body: CountLikedYouRequest,
    svc: ExploreService = Depends(explore_service_dep),
) -> CountLikedYouResponse:
    with _error_mapping():
        count = await svc.count_liked_you(recipient_user_id=body.recipient_user_id)
    return CountLikedYouResponse(count=count)


@router.post("/put-decision", response_model=PutDecisionResponse)
async def put_decision(
    body: PutDecisionRequest,
    svc: ExploreService = Depends(explore_service_dep),
) -> PutDecisionResponse:
    with _error_mapping():
        mutual = await svc.put_decision(
            recipient_user_id=body.recipient_user_id,
            actor_user_id=body.actor_user_id,
            liked_recipient=body.liked_recipient,
        )
    return PutDecisionResponse(mutual_likes=mutual)


# --- Module Notes -----------------------------------------------------------
# Error bodies use FastAPI's `{"detail": ...}` envelope with a stable `code` field.
