from .database import (
    Base,
    Stream,
    UTCDateTime,
    create_tables,
    db,
    db_context,
    db_wrapper,
    dispose_engine,
    filter_by,
    get_engine,
    init_engine,
    select,
)


__all__ = [
    "Base",
    "Stream",
    "UTCDateTime",
    "create_tables",
    "db",
    "db_context",
    "db_wrapper",
    "dispose_engine",
    "filter_by",
    "get_engine",
    "init_engine",
    "select",
]
