from fastapi import Depends, Request
from fastapi.openapi.models import HTTPBearer
from fastapi.security.base import SecurityBase
from pydantic import ValidationError

from .exceptions.auth import InvalidTokenError, PermissionDeniedError
from .schemas.user import User, UserAccessToken
from .utils.jwt import decode_jwt


def get_token(request: Request) -> str:
    authorization: str = request.headers.get("Authorization", "")
    return authorization.removeprefix("Bearer").strip()


class HTTPAuth(SecurityBase):
    def __init__(self) -> None:
        self.model = HTTPBearer()
        self.scheme_name = self.__class__.__name__

    async def __call__(self, request: Request) -> str:
        return get_token(request)


class JWTAuth(HTTPAuth):
    async def __call__(self, request: Request) -> User | None:
        if not (token := await super().__call__(request)):
            return None

        if (data := decode_jwt(token, ["uid", "rt", "data"])) is None:
            return None

        try:
            access_token = UserAccessToken.model_validate(data)
        except ValidationError:
            return None

        if await access_token.is_revoked():
            return None

        return access_token.to_user()


async def _get_user(user: User | None = Depends(JWTAuth())) -> User:
    if user is None:
        raise InvalidTokenError
    return user


async def _get_mentor(user: User = Depends(_get_user)) -> User:
    if not user.is_mentor and not user.admin:
        raise PermissionDeniedError
    return user


user_auth = Depends(_get_user)
mentor_auth = Depends(_get_mentor)
