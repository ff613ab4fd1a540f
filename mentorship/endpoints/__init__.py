from fastapi import APIRouter

from . import bookings, calendar, connections, slots


ROUTER = APIRouter()
TAGS: list[dict[str, str]] = []

for module in [slots, connections, bookings, calendar]:
    name = module.__name__.split(".")[-1]
    ROUTER.include_router(module.router, tags=[name])
    TAGS.append({"name": name, "description": module.__doc__ or ""})
