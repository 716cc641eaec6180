"""
JSON Body Limit Middleware

Caps request bodies on JSON routes. A declared Content-Length over the
limit is rejected before the app runs; bodies without one (chunked uploads)
are counted as they stream in. Raw-body routes (payment webhooks) are exempt
and pass through untouched.
"""
import logging
from typing import Iterable

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.exceptions import APIException, error_envelope

logger = logging.getLogger(__name__)

PAYLOAD_TOO_LARGE = 413


class PayloadTooLargeError(APIException):
    def __init__(self, max_bytes: int):
        super().__init__(status_code=PAYLOAD_TOO_LARGE, detail=f"Request body exceeds {max_bytes} bytes")


class JSONBodyLimitMiddleware:
    """Reject oversized bodies with 413 before they reach a JSON route."""

    def __init__(self, app: ASGIApp, max_bytes: int, raw_body_paths: Iterable[str] = ()):
        self.app = app
        self.max_bytes = max_bytes
        self.raw_body_paths = frozenset(raw_body_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.raw_body_paths:
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                response = JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content=error_envelope(status.HTTP_400_BAD_REQUEST, "Invalid Content-Length header"),
                )
                await response(scope, receive, send)
                return
            if size > self.max_bytes:
                logger.warning(f"Rejected {size} byte body on {scope['path']} (limit {self.max_bytes})")
                response = JSONResponse(
                    status_code=PAYLOAD_TOO_LARGE,
                    content=error_envelope(PAYLOAD_TOO_LARGE, f"Request body exceeds {self.max_bytes} bytes"),
                )
                await response(scope, receive, send)
                return

        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(f"Streamed body on {scope['path']} passed {self.max_bytes} bytes")
                    # Raised inside the route's body read; the HTTP exception handler renders it.
                    raise PayloadTooLargeError(self.max_bytes)
            return message

        await self.app(scope, counting_receive, send)
