from pydantic import BaseModel, ConfigDict, Field

from ..redis import auth_redis


MENTOR_ROLE = "mentor"


class User(BaseModel):
    id: str
    role: str
    admin: bool

    @property
    def is_mentor(self) -> bool:
        return self.role == MENTOR_ROLE


class UserAccessTokenData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str
    admin: bool = False


class UserAccessToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uid: str
    rt: str
    data: UserAccessTokenData

    def to_user(self) -> User:
        return User(id=self.uid, **self.data.model_dump())

    async def is_revoked(self) -> bool:
        return bool(await auth_redis.exists(f"session_logout:{self.rt}"))


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Unique identifier for the user")
    name: str = Field(description="Unique username")
    display_name: str = Field(description="Full name of the user")
    email: str | None = Field(None, description="Email address")
    avatar_url: str | None = Field(None, description="URL of the user's avatar")
    role: str | None = Field(None, description="Role of the user")

    @property
    def is_mentor(self) -> bool:
        return self.role == MENTOR_ROLE

    def __str__(self) -> str:
        if self.name.lower() == self.display_name.lower():
            return self.display_name
        return f"{self.display_name} ({self.name})"
