from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from gym_management.core.config import get_settings
from gym_management.core.exceptions import Unauthenticated

logger = logging.getLogger(__name__)

settings = get_settings()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Hash con formato desconocido
        logger.warning("Hash de contraseña con formato no reconocido")
        return False


def create_access_token(
    user_id: int, email: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Emite un JWT firmado con SECRET_KEY con el id, email y rol del usuario.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    to_encode: Dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifica firma y expiración de un token.

    Raises:
        Unauthenticated: si el token ha expirado o no es válido
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthenticated(error_details="Token expired")
    except JWTError:
        raise Unauthenticated(error_details="Invalid or expired token")

    if not payload.get("sub"):
        raise Unauthenticated(error_details="Invalid or expired token")
    return payload
