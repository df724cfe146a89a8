# svue_api/core/logging.py
"""
Process-wide logging setup.

Every record gets the current request id, and anything that looks like an
Authorization value or a password is scrubbed before it is emitted.
"""
from __future__ import annotations

import logging
import re
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_SECRET_PATTERNS = (
    (re.compile(r"\b(Basic|Bearer)\s+[A-Za-z0-9+/=._-]+"), r"\1 ***"),
    (re.compile(r"(?i)(password\s*[=:]\s*)\S+"), r"\1***"),
    (re.compile(r"(?i)(<password>).*?(</password>)"), r"\1***\2"),
)


def mask_secrets(message: str) -> str:
    for pattern, repl in _SECRET_PATTERNS:
        message = pattern.sub(repl, message)
    return message


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        msg = record.getMessage()
        masked = mask_secrets(msg)
        if masked != msg:
            record.msg = masked
            record.args = None
        return True


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if any(isinstance(f, RequestContextFilter) for h in root.handlers for f in h.filters):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"
    ))
    root.addHandler(handler)
    root.setLevel(level.upper())
