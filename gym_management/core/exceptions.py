"""
Errores de dominio de la API.

Cada error lleva el código HTTP con el que se responde y el mensaje que ve
el cliente. Las reglas de negocio los lanzan sin conocer la capa HTTP; los
handlers registrados en ``gym_management.main`` los convierten en el sobre
JSON ``{success: false, message, errorDetails?, statusCode}``.
"""
from typing import Any, Dict, Optional, Union

ErrorDetails = Union[str, Dict[str, str]]


class GymAPIError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, error_details: Optional[ErrorDetails] = None):
        self.message = message or self.message
        self.error_details = error_details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.error_details is not None:
            body["errorDetails"] = self.error_details
        body["statusCode"] = self.status_code
        return body


class NotFoundError(GymAPIError):
    status_code = 404
    message = "Record not found"


class FieldValidationError(GymAPIError):
    """Error de validación asociado a un campo concreto de la petición."""
    status_code = 400
    message = "Validation error occurred."

    def __init__(self, field: str, detail: str):
        self.field = field
        super().__init__(error_details={"field": field, "message": detail})


class InvalidDuration(FieldValidationError):
    def __init__(self, detail: str = "Class duration must be exactly 2 hours"):
        super().__init__("duration", detail)


class BadRequestError(GymAPIError):
    status_code = 400
    message = "Bad request"


class DailyLimitExceeded(BadRequestError):
    message = "Maximum of 5 class schedules allowed per day"


class TimeConflict(BadRequestError):
    message = "Time conflict with existing schedule"


class ScheduleFull(BadRequestError):
    message = "Class schedule is full. Maximum 10 trainees allowed per schedule."


class DuplicateBooking(BadRequestError):
    message = "You have already booked this class"


class TraineeTimeConflict(BadRequestError):
    message = "You already have a booking at this time"


class PastSchedule(BadRequestError):
    message = "Cannot book past schedules"


class EmailAlreadyRegistered(BadRequestError):
    message = "User with this email already exists"


class StorageConflict(BadRequestError):
    # Violación de una restricción única detectada por la base de datos
    message = "Validation error occurred."

    def __init__(self, error_details: ErrorDetails = "Duplicate entry. This record already exists."):
        super().__init__(error_details=error_details)


class Unauthenticated(GymAPIError):
    status_code = 401
    message = "Unauthorized access."


class Forbidden(GymAPIError):
    status_code = 403
    message = "Unauthorized access."
