from __future__ import annotations

import contextvars
import logging
import uuid
from typing import Optional

REQUEST_ID = contextvars.ContextVar("request_id", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def set_request_id(request_id: str) -> contextvars.Token:
    return REQUEST_ID.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    REQUEST_ID.reset(token)


def get_request_id() -> Optional[str]:
    return REQUEST_ID.get()


class RequestIdFilter(logging.Filter):
    """Stamps every record with the id of the request that produced it."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s"


def configure_logging(level: str = "info") -> logging.Handler:
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    # "trace" is uvicorn-only; stdlib logging tops out at DEBUG
    root.setLevel("DEBUG" if level.lower() == "trace" else level.upper())
    return handler
