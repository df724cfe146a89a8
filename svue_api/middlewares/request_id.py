from __future__ import annotations

import re
import uuid
from fastapi import Request
from starlette.responses import Response

from svue_api.core.logging import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"

# client supplied ids end up in logs and headers; keep them boring
_VALID_RID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


async def request_id_middleware(request: Request, call_next):
    rid = request.headers.get(REQUEST_ID_HEADER) or ""
    if not _VALID_RID.match(rid):
        rid = uuid.uuid4().hex
    request.state.request_id = rid
    ctx_token = request_id_var.set(rid)

    try:
        response: Response = await call_next(request)
    finally:
        request_id_var.reset(ctx_token)

    response.headers[REQUEST_ID_HEADER] = rid
    return response
