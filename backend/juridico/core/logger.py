"""
Application logger.

Every record carries the correlation id of the request being served
(``-`` outside a request), so lines from one HTTP call can be grepped together.
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

from juridico.core.config import settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


def _build_logger() -> logging.Logger:
    log = logging.getLogger("juridico")
    if log.handlers:
        return log

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
        )
    )
    handler.addFilter(CorrelationIdFilter())
    log.addHandler(handler)
    log.setLevel((settings.LOG_LEVEL or "INFO").upper())
    log.propagate = False
    return log


logger = _build_logger()
