# svue_api/middlewares/logging.py
"""Access log middleware.

Pure ASGI rather than BaseHTTPMiddleware so streaming bodies and exception
groups behave on Python 3.11+.

Headers are never logged (they carry Authorization and Set-Token). Response
bodies are student records, so they only show up at DEBUG, truncated.
"""
from __future__ import annotations

import json
import logging
import time
from urllib.parse import parse_qsl

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("api.access")

MAX_BODY_LOG = 2000


class LoggingMiddleware:

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "")
        path = scope.get("path", "")
        query_string = scope.get("query_string", b"").decode("latin-1")
        query_params = dict(parse_qsl(query_string, keep_blank_values=True))

        req_log = f">>> {method} {path}"
        if query_params:
            req_log += f" | Query: {json.dumps(query_params, ensure_ascii=False)}"
        logger.info(req_log)

        response_status = 0
        response_type = ""
        response_size = 0
        json_parts: list[bytes] = []

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status, response_type, response_size
            if message["type"] == "http.response.start":
                response_status = message.get("status", 0)
                for k, v in message.get("headers", []):
                    if k.lower() == b"content-type":
                        response_type = v.decode("latin-1")
            elif message["type"] == "http.response.body":
                body = message.get("body", b"")
                response_size += len(body)
                if body and response_type.startswith("application/json") and logger.isEnabledFor(logging.DEBUG):
                    json_parts.append(body)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            logger.info(
                f"<<< {method} {path} | Status: {response_status} | "
                f"{response_type or '-'} {response_size}B | Time: {duration:.3f}s"
            )

            if json_parts:
                body = b"".join(json_parts).decode("utf-8", "replace")
                if len(body) > MAX_BODY_LOG:
                    body = body[:MAX_BODY_LOG] + "...[truncated]"
                logger.debug(f"    Body: {body}")
