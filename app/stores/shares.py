"""Persistence for shares.

``ShareStore`` wraps a SQLAlchemy session handed to it by the caller; it
never opens connections of its own. It flushes but does not commit, so the
request (or test) that owns the session decides the transaction outcome.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.errors import InvalidIdError, ShareNotFoundError, ShareValidationError
from app.models.share import MESSAGE_MAX_LENGTH, Share, ShareStatus, utcnow

PARTY_FIELDS = {
    "from_user_id": Share.from_user_id,
    "to_user_id": Share.to_user_id,
}


@dataclass
class Page:
    items: list[Share]
    page: int
    limit: int
    total: int

    @property
    def has_next(self) -> bool:
        return (self.page - 1) * self.limit + len(self.items) < self.total


def parse_share_id(value: str) -> uuid.UUID:
    """Parse a share id, raising InvalidIdError when it is not a UUID."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidIdError()


def normalize_message(message: str | None) -> str | None:
    if message is None:
        return None
    message = message.strip()
    if not message:
        return None
    if len(message) > MESSAGE_MAX_LENGTH:
        raise ShareValidationError(
            f"message must be at most {MESSAGE_MAX_LENGTH} characters"
        )
    return message


def apply_status(share: Share, status: str) -> None:
    """Move a share to ``status``, stamping watched_at on the first watch."""
    if (
        status == ShareStatus.WATCHED.value
        and share.status != ShareStatus.WATCHED.value
        and share.watched_at is None
    ):
        share.watched_at = utcnow()
    share.status = status


def _party_column(field: str):
    try:
        return PARTY_FIELDS[field]
    except KeyError:
        raise ValueError(f"Cannot query shares by {field!r}")


class ShareStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        media_id: str,
        from_user_id: str,
        to_user_id: str,
        message: str | None = None,
    ) -> Share:
        """Insert a new pending share.

        Parameters:
            media_id: Reference to the shared media item.
            from_user_id: The sending user.
            to_user_id: The receiving user.
            message: Optional note, trimmed before storage.

        Returns:
            The flushed share with id and timestamps assigned.

        Raises:
            ShareValidationError: A required field is blank or the message is too long.
        """
        for name, value in (
            ("mediaId", media_id),
            ("fromUserId", from_user_id),
            ("toUserId", to_user_id),
        ):
            if not isinstance(value, str) or not value.strip():
                raise ShareValidationError(f"{name} is required")

        share = Share(
            media_id=media_id.strip(),
            from_user_id=from_user_id.strip(),
            to_user_id=to_user_id.strip(),
            message=normalize_message(message),
            status=ShareStatus.PENDING.value,
        )
        self.db.add(share)
        self.db.flush()
        return share

    def find_by_id(self, share_id: uuid.UUID) -> Share | None:
        return self.db.get(Share, share_id)

    def update(self, share_id: uuid.UUID, status: str | None = None) -> Share:
        share = self.find_by_id(share_id)
        if share is None:
            raise ShareNotFoundError()
        if status is not None:
            if status not in {s.value for s in ShareStatus}:
                raise ShareValidationError(f"Unknown status {status!r}")
            apply_status(share, status)
        self.db.flush()
        return share

    def delete(self, share_id: uuid.UUID) -> None:
        share = self.find_by_id(share_id)
        if share is None:
            raise ShareNotFoundError()
        self.db.delete(share)
        self.db.flush()

    def list_by_field(
        self,
        field: str,
        value: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """List one user's shares, newest first.

        Parameters:
            field: ``from_user_id`` or ``to_user_id``.
            value: The user id to match.
            status: Optional status filter.
            page: 1-based page number.
            limit: Page size.

        Returns:
            The requested page plus the unpaginated match count.
        """
        column = _party_column(field)
        conditions = [column == value]
        if status is not None:
            conditions.append(Share.status == status)

        items = list(
            self.db.execute(
                select(Share)
                .where(*conditions)
                .order_by(Share.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        total = self.db.execute(
            select(func.count()).select_from(Share).where(*conditions)
        ).scalar_one()
        return Page(items=items, page=page, limit=limit, total=total)

    def stats_by_field(self, field: str, value: str) -> dict[str, int]:
        column = _party_column(field)
        rows = self.db.execute(
            select(Share.status, func.count())
            .where(column == value)
            .group_by(Share.status)
        ).all()

        counts = {s.value: 0 for s in ShareStatus}
        for status, count in rows:
            counts[status] = count
        counts["total"] = sum(counts.values())
        return counts
