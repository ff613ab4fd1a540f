"""Mentor connections, weekly availability and session booking."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .database import create_tables, db, db_context, dispose_engine, get_engine
from .endpoints import ROUTER, TAGS
from .logger import get_logger, setup_sentry
from .settings import settings
from .version import __version__


NAME = "mentorship"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info(f"starting {NAME} {__version__}")
    if get_engine().dialect.name == "sqlite":
        # no migrations for local sqlite databases
        await create_tables()
    yield
    logger.info(f"shutting down {NAME}")
    await dispose_engine()


if settings.sentry_dsn:
    setup_sentry(settings.sentry_dsn, NAME, __version__)

app = FastAPI(
    title="Bootstrap Academy Backend: Mentorship Microservice",
    description=__doc__,
    version=__version__,
    root_path=settings.root_path,
    root_path_in_servers=False,
    servers=[{"url": settings.root_path}] if settings.root_path else None,
    openapi_tags=TAGS,
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(ROUTER)


@app.middleware("http")
async def db_session(request: Request, call_next: Callable[..., Awaitable[Response]]) -> Response:
    async with db_context():
        return await call_next(request)


@app.exception_handler(StarletteHTTPException)
async def rollback_on_exception(request: Request, exc: HTTPException) -> Response:
    await db.rollback()
    return await http_exception_handler(request, exc)


@app.get("/status", include_in_schema=False)
async def status() -> dict[str, str]:
    return {"name": NAME, "version": __version__}
