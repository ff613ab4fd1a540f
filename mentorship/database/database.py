from __future__ import annotations

from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, ParamSpec, TypeVar, cast

from sqlalchemy import DateTime, TypeDecorator
from sqlalchemy import select as sa_select
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncScalarResult, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import Executable, Select
from sqlalchemy.sql.functions import count

from ..logger import get_logger
from ..settings import settings


T = TypeVar("T")
P = ParamSpec("P")

logger = get_logger(__name__)

Base = declarative_base()

_engine: AsyncEngine | None = None


def select(entity: Any, *args: Any) -> Select:
    """Shortcut for :meth:`sqlalchemy.select`"""

    return sa_select(entity, *args)


def filter_by(cls: Any, *args: Any, **kwargs: Any) -> Select:
    """Shortcut for :meth:`sqlalchemy.sql.Select.filter_by`"""

    return select(cls, *args).filter_by(**kwargs)


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone aware datetime, stored as naive UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


def engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.sql_show_statements, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options |= {
            "pool_recycle": settings.pool_recycle,
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
        }
    if url.startswith(("mysql", "mariadb")):
        # reads after the schedule lock must see rows committed while waiting for it
        options["isolation_level"] = "READ COMMITTED"
    return options


def init_engine(url: str | None = None) -> AsyncEngine:
    global _engine

    url = url or settings.database_url
    logger.debug("creating database engine")
    _engine = create_async_engine(url, **engine_options(url))
    return _engine


def get_engine() -> AsyncEngine:
    return _engine or init_engine()


async def create_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None


class DB:
    """Thin wrapper around one async session."""

    def __init__(self, engine: AsyncEngine):
        self.session = AsyncSession(engine, expire_on_commit=False)
        self._after_commit: list[Callable[[], Awaitable[Any]]] = []

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def after_commit(self, callback: Callable[P, Awaitable[Any]], *args: P.args, **kwargs: P.kwargs) -> None:
        """Run `callback(*args, **kwargs)` once the current transaction has been committed. Dropped on rollback."""

        self._after_commit.append(lambda: callback(*args, **kwargs))

    async def add(self, obj: T) -> T:
        self.session.add(obj)
        return obj

    async def delete(self, obj: T) -> T:
        await self.session.delete(obj)
        return obj

    async def flush(self) -> None:
        await self.session.flush()

    async def refresh(self, obj: Any) -> None:
        await self.session.refresh(obj)

    async def exec(self, statement: Executable) -> Result[Any]:
        return await self.session.execute(statement)

    async def stream(self, statement: Select) -> AsyncScalarResult[Any]:
        return (await self.session.stream(statement)).scalars()

    async def all(self, statement: Select) -> list[Any]:
        return [x async for x in await self.stream(statement)]

    async def first(self, statement: Select) -> Any | None:
        return (await self.exec(statement)).scalar()

    async def exists(self, statement: Select) -> bool:
        return bool(await self.first(select(statement.exists())))

    async def count(self, statement: Select) -> int:
        return cast(int, await self.first(select(count()).select_from(statement.subquery())))

    async def get(self, cls: type[T], *args: Any, **kwargs: Any) -> T | None:
        return cast(T | None, await self.first(filter_by(cls, *args, **kwargs).limit(1)))

    async def commit(self) -> None:
        await self.session.commit()
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            await callback()

    async def rollback(self) -> None:
        self._after_commit.clear()
        await self.session.rollback()

    async def close(self) -> None:
        await self.session.close()


_db_context: ContextVar[DB] = ContextVar("db")


class _DBProxy:
    def __getattr__(self, item: str) -> Any:
        return getattr(_db_context.get(), item)


db: DB = cast(DB, _DBProxy())


@asynccontextmanager
async def db_context() -> AsyncIterator[DB]:
    """Bind a fresh session to the current context. Commits on success, rolls back on error."""

    session = DB(get_engine())
    token = _db_context.set(session)
    try:
        yield session
    except BaseException:
        await session.rollback()
        raise
    else:
        await session.commit()
    finally:
        await session.close()
        _db_context.reset(token)


def db_wrapper(f: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    @wraps(f)
    async def inner(*args: P.args, **kwargs: P.kwargs) -> T:
        async with db_context():
            return await f(*args, **kwargs)

    return inner


class Stream(Generic[T]):
    """
    Lazy, restartable view of a query.

    Nothing is executed until the stream is iterated, and every iteration runs the statement again.
    """

    def __init__(self, statement: Select):
        self.statement = statement

    async def __aiter__(self) -> AsyncIterator[T]:
        async for row in await db.stream(self.statement):
            yield row

    async def all(self) -> list[T]:
        return await db.all(self.statement)

    async def first(self) -> T | None:
        return cast(T | None, await db.first(self.statement.limit(1)))

    async def count(self) -> int:
        return await db.count(self.statement)
