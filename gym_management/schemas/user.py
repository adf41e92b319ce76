from typing import Optional
from datetime import datetime

from pydantic import EmailStr, field_validator

from gym_management.models.user import UserRole
from gym_management.schemas.base import CamelModel


def _check_name(value: str, label: str) -> str:
    value = (value or "").strip()
    if len(value) < 2:
        raise ValueError(f"{label} must be at least 2 characters")
    return value


# Propiedades para recibir a través de API al crear usuario
class UserCreate(CamelModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    role: UserRole

    @field_validator("password")
    def check_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("first_name")
    def check_first_name(cls, v: str) -> str:
        return _check_name(v, "First name")

    @field_validator("last_name")
    def check_last_name(cls, v: str) -> str:
        return _check_name(v, "Last name")


class TrainerCreate(UserCreate):
    # El rol siempre es TRAINER, se ignora lo que venga en el cuerpo
    role: UserRole = UserRole.TRAINER


class UserLogin(CamelModel):
    email: EmailStr
    password: str

    @field_validator("password")
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


# Actualización de perfil del alumno: solo los campos enviados
class UserProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("first_name")
    def check_first_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_name(v, "First name")

    @field_validator("last_name")
    def check_last_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_name(v, "Last name")


# Propiedades para retornar a través de API
class User(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Vista reducida para anidar en horarios y reservas
class UserSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


class AuthPayload(CamelModel):
    user: User
    token: str
