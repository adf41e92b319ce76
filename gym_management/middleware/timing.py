import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Añade ``X-Process-Time`` (ms) y ``X-Process-Speed`` a cada respuesta y
    avisa en el log de las peticiones que superan ``slow_request_ms``.
    """

    def __init__(self, app: ASGIApp, medium_request_ms: float = 300, slow_request_ms: float = 700):
        super().__init__(app)
        self.medium_request_ms = medium_request_ms
        self.slow_request_ms = slow_request_ms

    def _speed(self, elapsed_ms: float) -> str:
        if elapsed_ms > self.slow_request_ms:
            return "SLOW"
        if elapsed_ms > self.medium_request_ms:
            return "MEDIUM"
        return "FAST"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        speed = self._speed(elapsed_ms)
        if speed == "SLOW":
            logger.warning(
                f"Petición lenta {request.method} {request.url.path} -> {response.status_code}: {elapsed_ms:.2f}ms"
            )

        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        response.headers["X-Process-Speed"] = speed
        return response
