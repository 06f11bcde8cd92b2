"""Request-level share operations.

Each method takes the caller resolved by the user service (``None`` for an
anonymous request), checks input and permissions before touching state, and
delegates persistence to ``ShareStore``.
"""

from app.errors import (
    AuthenticationRequiredError,
    ForbiddenError,
    InvalidShareError,
    InvalidStatusError,
    MissingFieldsError,
    ShareNotFoundError,
)
from app.logger import get_logger
from app.models.share import Share, ShareStatus
from app.schemas.auth import Identity
from app.stores.shares import Page, ShareStore, parse_share_id

logger = get_logger(__name__)

UPDATABLE_STATUSES = (ShareStatus.WATCHED.value, ShareStatus.ARCHIVED.value)
LIST_FILTER_ALL = "all"


def _require_caller(caller: Identity | None) -> Identity:
    if caller is None:
        raise AuthenticationRequiredError()
    return caller


def _is_party(share: Share, caller: Identity) -> bool:
    return caller.id in (share.from_user_id, share.to_user_id)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def parse_status_filter(status: str | None) -> str | None:
    """Map a list query's status parameter to a store filter."""
    if status is None or status == "" or status == LIST_FILTER_ALL:
        return None
    if status not in {s.value for s in ShareStatus}:
        allowed = ", ".join([LIST_FILTER_ALL] + [s.value for s in ShareStatus])
        raise InvalidStatusError(f"Status filter must be one of: {allowed}")
    return status


class ShareService:
    def __init__(self, store: ShareStore) -> None:
        self.store = store

    def create(
        self,
        caller: Identity | None,
        media_id: str | None,
        to_user_id: str | None,
        message: str | None = None,
    ) -> Share:
        caller = _require_caller(caller)
        if _blank(media_id) or _blank(to_user_id):
            raise MissingFieldsError()
        if to_user_id.strip() == caller.id:
            raise InvalidShareError()

        share = self.store.create(
            media_id=media_id,
            from_user_id=caller.id,
            to_user_id=to_user_id,
            message=message,
        )
        logger.info(
            "share_created",
            share_id=str(share.id),
            from_user_id=share.from_user_id,
            to_user_id=share.to_user_id,
        )
        return share

    def list_sent(
        self,
        caller: Identity | None,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        caller = _require_caller(caller)
        return self.store.list_by_field(
            "from_user_id", caller.id, parse_status_filter(status), page, limit
        )

    def list_received(
        self,
        caller: Identity | None,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        caller = _require_caller(caller)
        return self.store.list_by_field(
            "to_user_id", caller.id, parse_status_filter(status), page, limit
        )

    def stats(self, caller: Identity | None) -> dict[str, dict[str, int]]:
        caller = _require_caller(caller)
        return {
            "sent": self.store.stats_by_field("from_user_id", caller.id),
            "received": self.store.stats_by_field("to_user_id", caller.id),
        }

    def get(self, caller: Identity | None, share_id: str) -> Share:
        caller = _require_caller(caller)
        share = self._load(share_id)
        if not _is_party(share, caller):
            raise ForbiddenError("You don't have permission to view this share")
        return share

    def update_status(
        self, caller: Identity | None, share_id: str, status: str | None
    ) -> Share:
        """Mark a share watched or archived.

        Only the recipient may mark a share watched; either party may archive
        it. Without a status nothing changes, but the caller must still be a
        party to the share. Repeating the current status is allowed and
        leaves watched_at as it was.

        Raises:
            InvalidIdError: share_id is not a valid id.
            InvalidStatusError: status is not watched or archived.
            ShareNotFoundError: No share has this id.
            ForbiddenError: The caller may not make this change.
        """
        caller = _require_caller(caller)
        parsed_id = parse_share_id(share_id)
        if status and status not in UPDATABLE_STATUSES:
            raise InvalidStatusError(
                f"Status must be one of: {', '.join(UPDATABLE_STATUSES)}"
            )

        share = self.store.find_by_id(parsed_id)
        if share is None:
            raise ShareNotFoundError()

        if status == ShareStatus.WATCHED.value and caller.id != share.to_user_id:
            raise ForbiddenError("Only the recipient can mark a share as watched")
        if status != ShareStatus.WATCHED.value and not _is_party(share, caller):
            raise ForbiddenError("You don't have permission to modify this share")

        share = self.store.update(parsed_id, status=status or None)
        logger.info(
            "share_updated",
            share_id=str(share.id),
            status=share.status,
            user_id=caller.id,
        )
        return share

    def delete(self, caller: Identity | None, share_id: str) -> None:
        caller = _require_caller(caller)
        share = self._load(share_id)
        if not _is_party(share, caller):
            raise ForbiddenError("You don't have permission to delete this share")
        self.store.delete(share.id)
        logger.info("share_deleted", share_id=str(share.id), user_id=caller.id)

    def _load(self, share_id: str) -> Share:
        share = self.store.find_by_id(parse_share_id(share_id))
        if share is None:
            raise ShareNotFoundError()
        return share
