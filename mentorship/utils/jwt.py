from datetime import timedelta
from typing import Any, cast

import jwt

from ..settings import settings
from .utc import utcnow


def encode_jwt(data: dict[str, Any], ttl: timedelta | None = None) -> str:
    if ttl is not None:
        data = data | {"exp": utcnow() + ttl}
    return jwt.encode(data, settings.jwt_secret, "HS256")


def decode_jwt(token: str, require: list[str] | None = None, audience: str | None = None) -> dict[str, Any] | None:
    try:
        return cast(
            dict[str, Any],
            jwt.decode(
                token, settings.jwt_secret, ["HS256"], audience=audience, options={"require": [*(require or [])]}
            ),
        )
    except jwt.InvalidTokenError:
        return None
