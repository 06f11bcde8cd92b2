from pydantic import BaseModel


class Identity(BaseModel):
    """The caller as reported by the user service."""

    id: str
    username: str | None = None
