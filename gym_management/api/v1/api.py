from fastapi import APIRouter

from gym_management.api.v1.endpoints import admin, auth, trainee, trainer
from gym_management.schemas.response import ErrorResponse

# Respuestas de error documentadas en OpenAPI para todas las rutas
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation or business rule error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ErrorResponse, "description": "Role not allowed"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

api_router = APIRouter(responses=ERROR_RESPONSES)

# Authentication module
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Administration module (trainers and timetable)
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])

# Trainer module
api_router.include_router(trainer.router, prefix="/trainer", tags=["trainer"])

# Trainee module (availability and bookings)
api_router.include_router(trainee.router, prefix="/trainee", tags=["trainee"])
