"""Caller lookup against the external user service.

The service never checks credentials itself. It forwards the request's
bearer token (``token`` mode) or session cookie (``session`` mode) to the
user service and trusts the identity it answers with. Any failure, including
a timeout, yields ``None`` so the request continues as anonymous.
"""

from typing import Protocol

import httpx

from app.config import settings
from app.logger import get_logger
from app.schemas.auth import Identity

logger = get_logger(__name__)

TOKEN_ENDPOINT = "/api/v1/auth/me"
SESSION_ENDPOINT = "/api/v1/session"


class IdentityResolver(Protocol):
    def resolve(
        self, authorization: str | None, cookie: str | None
    ) -> Identity | None: ...


def _identity_from_token_payload(payload: dict) -> Identity:
    user = payload["data"]["user"]
    return Identity(id=str(user["id"]), username=user.get("username"))


def _identity_from_session_payload(payload: dict) -> Identity:
    user = payload["user"]
    user_id = user.get("id", user.get("_id"))
    if user_id is None:
        raise KeyError("id")
    return Identity(id=str(user_id), username=user.get("username"))


class UserServiceClient:
    def __init__(
        self,
        base_url: str = settings.user_service_url,
        mode: str = settings.auth_mode,
        timeout: float = settings.auth_timeout_seconds,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if mode not in ("token", "session"):
            raise ValueError(f"Unknown auth mode {mode!r}")
        self.mode = mode
        self.client = httpx.Client(
            base_url=base_url, timeout=timeout, transport=transport
        )

    def resolve(
        self, authorization: str | None, cookie: str | None
    ) -> Identity | None:
        """Ask the user service who made the request.

        Parameters:
            authorization: The incoming Authorization header, if any.
            cookie: The incoming Cookie header, if any.

        Returns:
            The caller's identity, or None when anonymous or the lookup failed.
        """
        if self.mode == "token":
            if not authorization or not authorization.lower().startswith("bearer "):
                return None
            endpoint = TOKEN_ENDPOINT
            headers = {"Authorization": authorization}
            parse = _identity_from_token_payload
        else:
            if not cookie:
                return None
            endpoint = SESSION_ENDPOINT
            headers = {"Cookie": cookie}
            parse = _identity_from_session_payload

        try:
            response = self.client.get(endpoint, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "identity_lookup_error", endpoint=endpoint, error=str(exc)
            )
            return None

        if not response.is_success:
            logger.info(
                "identity_lookup_rejected",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            return None

        try:
            return parse(response.json())
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "identity_lookup_malformed", endpoint=endpoint, error=str(exc)
            )
            return None

    def close(self) -> None:
        self.client.close()
