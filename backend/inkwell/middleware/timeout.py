"""
Inkwell Backend — Request Timeout Middleware
==============================================

What:  Bounds the total time of a request (handler + database round trips).
How:   Runs the rest of the ASGI chain under asyncio.wait_for. On expiry the
       handler is cancelled, which unwinds the session dependency and returns
       its connection to the pool, and the client gets a 500 with a generic
       error body.

Written as plain ASGI middleware rather than BaseHTTPMiddleware: call_next
runs the handler in a separate task that a timeout around call_next would not
cancel.
"""

import asyncio
import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from inkwell.exceptions import RequestTimeoutError
from inkwell.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """Cancels HTTP requests that run longer than `timeout` seconds."""

    def __init__(self, app: ASGIApp, timeout: float = 5.0):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            exc = RequestTimeoutError(timeout=self.timeout)
            rid = request_id_var.get("")
            logger.error(
                "[%s] %s %s exceeded %.2fs",
                rid,
                scope.get("method", ""),
                scope.get("path", ""),
                self.timeout,
            )
            # Status line already sent: nothing left to report to the client
            if response_started:
                return

            content = {"error": exc.message, "code": "timeout"}
            if rid:
                content["requestId"] = rid
            response = JSONResponse(status_code=exc.status_code, content=content)
            await response(scope, receive, send)
