"""
Middleware for the Employee Records API
"""

import time
import uuid
import logging
from typing import Callable, Dict, Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from fastapi import status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings

logger = logging.getLogger(__name__)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Middleware to track requests with unique IDs and timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {type(exc).__name__}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "process_time": process_time,
                }
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": process_time,
            }
        )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Fixed-window, per-client rate limiting kept in process memory."""

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # client ip -> (window start, request count)
        self.windows: Dict[str, Tuple[float, int]] = {}
        self.last_prune = 0.0

    def prune_expired(self, current_time: float):
        """Forget clients whose window has run out."""
        expired = [
            client_ip for client_ip, (window_start, _) in self.windows.items()
            if current_time - window_start >= self.window_seconds
        ]
        for client_ip in expired:
            del self.windows[client_ip]
        self.last_prune = current_time

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(settings.api_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        current_time = time.time()

        # Sweep at most once per window
        if current_time - self.last_prune >= self.window_seconds:
            self.prune_expired(current_time)

        window_start, count = self.windows.get(client_ip, (current_time, 0))
        if current_time - window_start >= self.window_seconds:
            window_start, count = current_time, 0

        if count >= self.max_requests:
            retry_after = int(self.window_seconds - (current_time - window_start)) + 1
            logger.warning(
                f"Rate limit exceeded for IP: {client_ip}",
                extra={"client_ip": client_ip, "path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "message": "Too many requests from this IP, please try again later.",
                    "code": "RATE_LIMIT_EXCEEDED"
                },
                headers={"Retry-After": str(retry_after)}
            )

        self.windows[client_ip] = (window_start, count + 1)
        return await call_next(request)


def add_middleware(app):
    """Add all middleware to the FastAPI app."""

    # Last added runs first
    if not settings.debug or settings.enable_rate_limiting:
        app.add_middleware(
            RateLimitingMiddleware,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds
        )

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTrackingMiddleware)

    logger.info("Middleware registered successfully")
