"""
安全中间件 - 添加安全头部和请求监控
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 5.0


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers, reports processing time and flags slow requests.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()
        client_ip = request.headers.get("X-Real-IP", request.client.host if request.client else "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request error from {client_ip}: {str(e)}")
            raise

        process_time = time.time() - start_time

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        response.headers["Pragma"] = "no-cache"

        if "Server" in response.headers:
            del response.headers["Server"]

        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {request.method} {request.url.path} took {process_time:.2f}s from {client_ip}")

        return response
