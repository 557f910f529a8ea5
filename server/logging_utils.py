# logging_utils.py
# JSON-lines logging shared by the API, the upstream client and the merger

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SERVICE_NAME = os.getenv("SERVICE_NAME", "flightinfo")
ENV = os.getenv("APP_ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")

# Set once per HTTP request by the api middleware
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Whatever a bare LogRecord already carries, plus the two attributes
# Formatter.format() adds later. Extras with these names would be rejected.
_RESERVED_LOG_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


def _utc_stamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONLogFormatter(logging.Formatter):
    """One JSON object per record; extras passed to the logger become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utc_stamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "env": ENV,
            "message": record.getMessage(),
        }
        rid = getattr(record, "request_id", None) or _request_id.get()
        if rid:
            payload["request_id"] = rid

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if not key.startswith("_") and key not in _RESERVED_LOG_FIELDS and key not in payload
        )

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _file_handler(path: str) -> logging.Handler:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    return logging.FileHandler(path)


def configure_logging() -> None:
    """Install the JSON handlers on the root logger; later calls are no-ops."""
    root = logging.getLogger()
    if getattr(root, "_flightinfo_configured", False):
        return

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error: Optional[OSError] = None
    if LOG_FILE:
        try:
            handlers.append(_file_handler(LOG_FILE))
        except OSError as e:
            file_error = e

    formatter = JSONLogFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
    root._flightinfo_configured = True  # type: ignore[attr-defined]

    if file_error is not None:
        log_event(
            logging.getLogger("flightinfo.logging"),
            "log_file_unavailable",
            level=logging.WARNING,
            path=LOG_FILE,
            error=str(file_error),
        )


def new_request_id() -> str:
    rid = uuid.uuid4().hex
    _request_id.set(rid)
    return rid


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """
    Log ``event`` as the message with ``fields`` attached as extras.

    A field named like a LogRecord attribute (``filename``, ``module``, ...)
    is stored as ``field_<name>`` so ``logger.log`` doesn't reject it.
    """
    extra = {
        (f"field_{key}" if key in _RESERVED_LOG_FIELDS else key): value
        for key, value in fields.items()
    }
    extra["event"] = event
    logger.log(level, event, exc_info=exc_info, extra=extra)
