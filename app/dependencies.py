from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.auth import IdentityResolver
from app.database import SessionLocal
from app.errors import AuthenticationRequiredError
from app.schemas.auth import Identity
from app.services.shares import ShareService
from app.stores.shares import ShareStore


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


DbSession = Annotated[Session, Depends(get_db)]


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


def get_caller(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> Identity | None:
    """Resolve the caller, or None for an anonymous request."""
    return resolver.resolve(
        request.headers.get("authorization"), request.headers.get("cookie")
    )


def require_caller(
    caller: Annotated[Identity | None, Depends(get_caller)],
) -> Identity:
    """Reject anonymous requests before their body or query is validated."""
    if caller is None:
        raise AuthenticationRequiredError()
    return caller


def get_share_service(db: DbSession) -> ShareService:
    return ShareService(ShareStore(db))


Caller = Annotated[Identity | None, Depends(get_caller)]
Shares = Annotated[ShareService, Depends(get_share_service)]
