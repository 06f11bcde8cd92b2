import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

MESSAGE_MAX_LENGTH = 500

Timestamp = DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShareStatus(str, enum.Enum):
    PENDING = "pending"
    WATCHED = "watched"
    ARCHIVED = "archived"


class Share(Base):
    __tablename__ = "shares"
    __table_args__ = (
        Index("ix_shares_from_user_created", "from_user_id", "created_at"),
        Index("ix_shares_to_user_status_created", "to_user_id", "status", "created_at"),
        Index("ix_shares_from_user_status", "from_user_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    media_id: Mapped[str] = mapped_column(String(64), index=True)
    from_user_id: Mapped[str] = mapped_column(String(64), index=True)
    to_user_id: Mapped[str] = mapped_column(String(64), index=True)
    message: Mapped[str | None] = mapped_column(
        String(MESSAGE_MAX_LENGTH), default=None
    )
    status: Mapped[str] = mapped_column(
        String(20), default=ShareStatus.PENDING.value, index=True
    )
    watched_at: Mapped[datetime | None] = mapped_column(Timestamp, default=None)
    created_at: Mapped[datetime] = mapped_column(Timestamp, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow, onupdate=utcnow
    )
