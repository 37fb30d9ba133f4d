from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from apiquant.request_context import new_request_id, reset_request_id, set_request_id

log = logging.getLogger("apiquant.access")


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Logs one line when a request arrives and one when its response starts.
    Streaming bodies keep flowing after the second line.
    """
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        request_id = new_request_id()
        token = set_request_id(request_id)
        client = request.client.host if request.client else None
        status = 500

        log.info("req_start %s %s client=%s", request.method, request.url.path, client)
        try:
            resp = await call_next(request)
            status = resp.status_code
            resp.headers["x-apiquant-request-id"] = request_id
            return resp
        finally:
            ttfb_ms = (time.time() - start) * 1000.0
            log.info("req_end %s %s status=%d ttfb_ms=%.3f",
                     request.method, request.url.path, int(status), ttfb_ms)
            reset_request_id(token)
