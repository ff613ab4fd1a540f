from ..schemas.user import UserInfo
from ..utils.cache import redis_cached
from .internal import InternalService


@redis_cached("user", "user_id")
async def get_userinfo(user_id: str) -> UserInfo | None:
    async with InternalService.AUTH.client as client:
        response = await client.get(f"/users/{user_id}")
        if response.status_code != 200:
            return None

        return UserInfo(**response.json())
