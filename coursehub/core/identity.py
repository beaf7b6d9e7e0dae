from dataclasses import dataclass

from fastapi import Request

from coursehub.core.config import settings
from coursehub.core.errors import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """Acting principal as supplied by the identity provider. The id is opaque."""

    user_id: str


def get_identity(request: Request) -> Identity:
    user_id = (request.headers.get(settings.identity_header) or "").strip()
    if not user_id:
        raise UnauthorizedError("Unauthorized")
    return Identity(user_id=user_id)
