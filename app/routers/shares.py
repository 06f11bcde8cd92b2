from fastapi import APIRouter, Depends, Query, status

from app.dependencies import Caller, Shares, require_caller
from app.schemas.common import Envelope, MessageResponse
from app.schemas.share import (
    Pagination,
    ShareCreate,
    SharePage,
    ShareRead,
    ShareStats,
    ShareUpdate,
)
from app.stores.shares import Page

router = APIRouter(
    prefix="/shares", tags=["shares"], dependencies=[Depends(require_caller)]
)

PageQuery = Query(default=1, ge=1)
LimitQuery = Query(default=20, ge=1, le=100)


def _page_response(page: Page) -> SharePage:
    return SharePage(
        data=[ShareRead.model_validate(share) for share in page.items],
        pagination=Pagination(
            page=page.page,
            limit=page.limit,
            total=page.total,
            has_next=page.has_next,
        ),
    )


@router.post(
    "",
    response_model=Envelope[ShareRead],
    status_code=status.HTTP_201_CREATED,
)
def create_share(
    caller: Caller, shares: Shares, request: ShareCreate | None = None
):
    request = request or ShareCreate()
    share = shares.create(
        caller,
        media_id=request.media_id,
        to_user_id=request.to_user_id,
        message=request.message,
    )
    return Envelope(data=ShareRead.model_validate(share))


# Fixed paths are registered before /{share_id} so they are not captured by it.
@router.get("/sent", response_model=SharePage)
def list_sent(
    caller: Caller,
    shares: Shares,
    status: str | None = None,
    page: int = PageQuery,
    limit: int = LimitQuery,
):
    return _page_response(shares.list_sent(caller, status, page, limit))


@router.get("/received", response_model=SharePage)
def list_received(
    caller: Caller,
    shares: Shares,
    status: str | None = None,
    page: int = PageQuery,
    limit: int = LimitQuery,
):
    return _page_response(shares.list_received(caller, status, page, limit))


@router.get("/stats", response_model=Envelope[ShareStats])
def share_stats(caller: Caller, shares: Shares):
    return Envelope(data=ShareStats.model_validate(shares.stats(caller)))


@router.get("/{share_id}", response_model=Envelope[ShareRead])
def get_share(share_id: str, caller: Caller, shares: Shares):
    return Envelope(data=ShareRead.model_validate(shares.get(caller, share_id)))


@router.patch("/{share_id}", response_model=Envelope[ShareRead])
def update_share(
    share_id: str,
    caller: Caller,
    shares: Shares,
    updates: ShareUpdate | None = None,
):
    new_status = updates.status if updates is not None else None
    share = shares.update_status(caller, share_id, new_status)
    return Envelope(data=ShareRead.model_validate(share))


@router.delete("/{share_id}", response_model=MessageResponse)
def delete_share(share_id: str, caller: Caller, shares: Shares):
    shares.delete(caller, share_id)
    return MessageResponse(message="Share deleted successfully")
