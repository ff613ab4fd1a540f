from sqlalchemy import BigInteger, Insert, String, insert, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, db
from ..logger import get_logger


logger = get_logger(__name__)


class ScheduleLock(Base):
    """
    One row per mentor, bumped before every write that has to be checked against the mentor's schedule.

    The `UPDATE` takes a row lock (PostgreSQL, MySQL) or the database write lock (SQLite), so concurrent
    check-then-insert sequences for the same mentor run one after another until the transaction ends.
    """

    __tablename__ = "mentoring_schedule_locks"

    mentor_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    revision: Mapped[int] = mapped_column(BigInteger, default=0)

    @classmethod
    def insert_missing(cls, mentor_id: str, dialect: str) -> Insert:
        """Insert the lock row of a mentor, doing nothing if a concurrent transaction already inserted it."""

        values = {"mentor_id": mentor_id, "revision": 0}
        if dialect == "postgresql":
            return postgresql.insert(cls).values(values).on_conflict_do_nothing(index_elements=["mentor_id"])
        if dialect == "sqlite":
            return sqlite.insert(cls).values(values).on_conflict_do_nothing(index_elements=["mentor_id"])
        return insert(cls).values(values).prefix_with("IGNORE")

    @classmethod
    async def acquire(cls, mentor_id: str) -> None:
        bump = (
            update(cls)
            .where(cls.mentor_id == mentor_id)
            .values(revision=cls.revision + 1)
            .execution_options(synchronize_session=False)
        )
        if not (await db.exec(bump)).rowcount:  # type: ignore[attr-defined]
            # a duplicate insert waits for the other transaction, the second update then locks its row
            await db.exec(cls.insert_missing(mentor_id, db.dialect))
            await db.exec(bump)
        logger.debug(f"acquired schedule lock of mentor {mentor_id}")
