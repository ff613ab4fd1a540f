from datetime import timedelta
from enum import Enum

from httpx import AsyncClient

from ..settings import settings
from ..utils.jwt import encode_jwt


class InternalService(str, Enum):
    AUTH = "auth"

    @property
    def url(self) -> str:
        return {InternalService.AUTH: settings.auth_url}[self]

    @property
    def client(self) -> AsyncClient:
        token = encode_jwt({"aud": self.value}, timedelta(seconds=settings.internal_jwt_ttl))
        return AsyncClient(base_url=self.url.rstrip("/") + "/_internal", headers={"Authorization": token})
