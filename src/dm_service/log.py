"""Logging setup shared by the API process and the workers."""
from __future__ import annotations

import logging

from dm_service.api.middleware.correlation_id import correlation_id_ctx

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s]: %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the X-Request-ID of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_ctx.get() or "-"
        return True


def configure_logging(level: str | None = None) -> None:
    if level is None:
        from dm_service.config import settings

        level = settings.LOG_LEVEL
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=[handler], force=True)
