import uuid
from datetime import datetime, timezone

from pydantic import field_validator

from app.schemas.common import CamelModel


class ShareCreate(CamelModel):
    media_id: str | None = None
    to_user_id: str | None = None
    message: str | None = None


class ShareUpdate(CamelModel):
    status: str | None = None


class ShareRead(CamelModel):
    id: uuid.UUID
    media_id: str
    from_user_id: str
    to_user_id: str
    message: str | None = None
    status: str
    watched_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("watched_at", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        # Stored timestamps are UTC; some databases hand them back naive.
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    has_next: bool


class SharePage(CamelModel):
    success: bool = True
    data: list[ShareRead]
    pagination: Pagination


class StatusCounts(CamelModel):
    pending: int = 0
    watched: int = 0
    archived: int = 0
    total: int = 0


class ShareStats(CamelModel):
    sent: StatusCounts
    received: StatusCounts
