from typing import Dict, Generic, Optional, TypeVar, Union

from gym_management.schemas.base import CamelModel

DataT = TypeVar("DataT")


class SuccessResponse(CamelModel, Generic[DataT]):
    success: bool = True
    status_code: int = 200
    message: str
    data: Optional[DataT] = None


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    error_details: Optional[Union[str, Dict[str, str]]] = None
    status_code: int


def success_response(message: str, data=None, status_code: int = 200) -> Dict:
    """Sobre de éxito {success, statusCode, message, data}."""
    return {"success": True, "statusCode": status_code, "message": message, "data": data}
