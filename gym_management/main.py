from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from slowapi.errors import RateLimitExceeded
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from gym_management.api.v1.api import api_router
from gym_management.core.config import Settings, get_settings
from gym_management.core.exceptions import GymAPIError
from gym_management.core.logging_config import setup_logging
from gym_management.db.init_db import create_tables
from gym_management.db.session import create_db_engine, create_session_factory
from gym_management.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from gym_management.middleware.timing import TimingMiddleware
from gym_management.schemas.response import success_response
from gym_management.services.user import user_service

logger = logging.getLogger(__name__)

# Mensajes por campo para errores de validación sin mensaje propio
# (campo ausente, email mal formado, rol desconocido...)
FIELD_MESSAGES = {
    "email": "Invalid email format.",
    "password": "Password is required",
    "firstName": "First name must be at least 2 characters",
    "lastName": "Last name must be at least 2 characters",
    "role": "Valid role (ADMIN, TRAINER, TRAINEE) is required",
    "title": "Title must be at least 3 characters",
    "date": "Valid date is required",
    "startTime": "Valid start time (HH:MM) is required",
    "endTime": "Valid end time (HH:MM) is required",
    "trainerId": "Trainer ID is required",
    "classScheduleId": "Class schedule ID is required",
}


def _error_body(status_code: int, message: str, error_details: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error_details is not None:
        body["errorDetails"] = error_details
    body["statusCode"] = status_code
    return body


def validation_error_details(exc: RequestValidationError) -> Dict[str, str]:
    """
    Reduce los errores de validación de FastAPI al primero, como
    ``{field, message}`` con el nombre del campo en camelCase.
    """
    errors = exc.errors()
    if not errors:
        return {"field": "body", "message": "Validation failed"}
    error = errors[0]

    loc = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = to_camel(loc[-1]) if loc else "body"

    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        # ValueError lanzado por nuestros validadores: su texto ya es el mensaje
        message = str(ctx["error"])
    else:
        message = FIELD_MESSAGES.get(field, error.get("msg", "Invalid value"))
    return {"field": field, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GymAPIError)
    async def gym_api_error_handler(request: Request, exc: GymAPIError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        details = validation_error_details(exc)
        logger.info(f"Validación fallida en {request.method} {request.url.path}: {details}")
        return JSONResponse(
            status_code=400,
            content=_error_body(400, "Validation error occurred.", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            content = _error_body(
                404, f"Route {request.url.path} not found", "The requested endpoint does not exist"
            )
        else:
            content = _error_body(exc.status_code, str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Error no controlado en {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(500, "Internal server error", "An unexpected error occurred"),
        )


def _mask_authorization(value: str) -> str:
    if value.startswith("Bearer "):
        token = value[7:]
        return f"Bearer ****{token[-6:]}" if len(token) > 6 else "Bearer ****"
    return "***masked***"


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Construye la aplicación con su propio engine y factoría de sesiones.

    Args:
        settings: configuración; por defecto la de ``get_settings()``
        engine: engine ya creado (los tests pasan uno en memoria)
    """
    settings = settings or get_settings()
    setup_logging(settings)

    if engine is None:
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Lifespan: Startup iniciado...")
        if settings.AUTO_CREATE_TABLES:
            create_tables(app.state.engine)
        if settings.FIRST_SUPERUSER and settings.FIRST_SUPERUSER_PASSWORD:
            db = app.state.session_factory()
            try:
                user_service.ensure_first_superuser(
                    db, settings.FIRST_SUPERUSER, settings.FIRST_SUPERUSER_PASSWORD
                )
            finally:
                db.close()

        yield  # Aplicación en ejecución

        logger.info("Lifespan: Shutdown iniciado...")
        app.state.engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Configurar rate limiting
    app.state.limiter = limiter

    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Middleware: Recibida petición: {request.method} {request.url}")
        if settings.DEBUG_MODE:
            # Sanitizar headers antes de loguear para evitar fuga de secretos
            headers_dict = dict(request.headers)
            if "authorization" in headers_dict:
                headers_dict["authorization"] = _mask_authorization(headers_dict["authorization"])
            if "cookie" in headers_dict:
                headers_dict["cookie"] = "***masked***"
            logger.debug(f"Middleware: Headers: {headers_dict}")

        response = await call_next(request)

        logger.info(f"Middleware: Enviando respuesta: {response.status_code}")
        return response

    # Añadir middleware para medir el tiempo de respuesta
    app.add_middleware(TimingMiddleware)

    # Configurar CORS para toda la aplicación
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,  # 24 horas en segundos
    )

    # Incluir routers
    app.include_router(api_router, prefix=settings.API_V1_STR)

    # Ruta raíz
    @app.get("/")
    def root():
        return success_response(
            "Gym Management API is running",
            {"timestamp": datetime.now(timezone.utc).isoformat()},
        )

    return app


app = create_app()


if __name__ == "__main__":
    settings_instance = get_settings()
    uvicorn.run("gym_management.main:app", host="0.0.0.0", port=8000, reload=settings_instance.DEBUG_MODE)
