"""
Rate limiting para los endpoints de autenticación.

Usa slowapi con almacenamiento en memoria por defecto; RATE_LIMIT_STORAGE_URI
permite apuntar a un backend compartido (p. ej. redis://) cuando hay varias
réplicas.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from gym_management.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Límites por tipo de endpoint
RATE_LIMITS = {
    "login": "5/minute",
    "register": "10/minute",
}


def get_client_identifier(request: Request) -> str:
    """IP del cliente según ASGI/uvicorn"""
    if request.client and request.client.host:
        return request.client.host
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)

if not settings.RATE_LIMIT_ENABLED:
    logger.info("Rate limiting deshabilitado (RATE_LIMIT_ENABLED=false)")


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handler personalizado para rate limit exceeded, con el sobre de error de la API"""
    logger.warning(
        f"Rate limit exceeded para {get_client_identifier(request)} "
        f"en {request.url.path} - Límite: {exc.detail}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please try again later.",
            "errorDetails": f"Rate limit exceeded: {exc.detail}",
            "statusCode": 429,
        },
    )
