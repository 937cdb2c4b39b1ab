"""Logging middleware for request/response tracking."""

import json
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ...utils.logger import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process and log each request/response."""
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        body = None
        if request.method in ["POST", "PUT", "PATCH"]:
            body_bytes = await request.body()
            if body_bytes:
                try:
                    body = json.loads(body_bytes)
                except ValueError as e:
                    self.logger.log_debug(f"Could not parse request body: {e}", request_id=request_id)

        self.logger.log_request(
            request_id=request_id,
            method=request.method,
            endpoint=request.url.path,
            headers=dict(request.headers),
            body=body,
            query_params=dict(request.query_params)
        )

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.logger.log_error(
                f"Request failed: {str(e)}",
                error=e,
                request_id=request_id,
                duration_ms=duration_ms
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        try:
            response_data = json.loads(response_body) if response_body else None
        except ValueError:
            response_data = response_body.decode('utf-8', errors='replace') if response_body else None

        self.logger.log_response(
            request_id=request_id,
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response_data,
            duration_ms=duration_ms
        )

        headers = dict(response.headers)
        headers["x-request-id"] = request_id
        headers.pop("content-length", None)
        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type
        )
