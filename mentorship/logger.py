import logging

import sentry_sdk
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from .settings import settings


logging_formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging_formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def setup_sentry(dsn: str, name: str, version: str) -> None:
    get_logger(__name__).debug("initializing sentry")
    sentry_sdk.init(
        dsn=dsn,
        attach_stacktrace=True,
        shutdown_timeout=5,
        integrations=[
            HttpxIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.DEBUG, event_level=logging.WARNING),
        ],
        release=f"{name}@{version}",
        environment=settings.sentry_environment,
    )
