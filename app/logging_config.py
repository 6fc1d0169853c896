# =============================================================================
# app/logging_config.py - Logging Setup
# =============================================================================
# Configures the root logger once at startup. Every record carries the id of
# the request it was logged under ("-" outside a request).
# =============================================================================

import logging

from app.context import get_request_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Add request_id to every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Configure the root logger and align uvicorn's loggers with it.

    Safe to call more than once; existing root handlers are replaced.
    """
    lvl = logging.DEBUG if debug else level.upper()

    logging.basicConfig(level=lvl, format=LOG_FORMAT, force=True)

    root = logging.getLogger()
    for handler in root.handlers:
        handler.addFilter(RequestIdFilter())

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = root.handlers
        uv_logger.propagate = False
        uv_logger.setLevel(lvl)
