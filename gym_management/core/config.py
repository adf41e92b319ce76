from typing import Any, List, Optional
from functools import lru_cache
import json
import logging

import pytz
from pydantic import EmailStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api"
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    # 60 minutos * 24 horas = 1 día
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 10

    # Información del proyecto
    PROJECT_NAME: str = "Gym Management API"
    PROJECT_DESCRIPTION: str = "API con FastAPI para gestión de horarios de clases y reservas"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = False
    LOG_DIR: str = "logs"

    # CORS: lista separada por comas o lista JSON
    BACKEND_CORS_ORIGINS: str = ""

    @property
    def cors_origins(self) -> List[str]:
        v = self.BACKEND_CORS_ORIGINS.strip()
        if not v:
            return []
        if v.startswith("["):
            return json.loads(v)
        return [i.strip() for i in v.split(",") if i.strip()]

    # Base de datos
    DATABASE_URL: str = "sqlite:///./gym_management.db"
    SQL_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    @field_validator("DATABASE_URL", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str]) -> Any:
        """Asegura que DATABASE_URL esté en el formato que entiende SQLAlchemy."""
        if not v:
            return "sqlite:///./gym_management.db"
        if v.startswith("postgres://"):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return "postgresql://" + v[len("postgres://"):]
        return v

    # Zona horaria en la que se interpretan fecha + hora de las clases
    GYM_TIMEZONE: str = "UTC"

    @field_validator("GYM_TIMEZONE")
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"GYM_TIMEZONE desconocida: {v}")
        return v

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Superadmin
    FIRST_SUPERUSER: Optional[EmailStr] = None
    FIRST_SUPERUSER_PASSWORD: Optional[str] = None


# Usar una función con caché para obtener la configuración
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings
