"""
Dependencias de autenticación y autorización por rol.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gym_management.core.exceptions import Forbidden, Unauthenticated
from gym_management.core.security import decode_access_token
from gym_management.db.session import get_db
from gym_management.models.user import UserRole
from gym_management.repositories.user import user_repository

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    role: UserRole


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Resuelve el token Bearer a la identidad del usuario. El rol se lee de la
    base de datos, no del token.
    """
    if creds is None or not creds.credentials:
        raise Unauthenticated(error_details="Access token is required")

    payload = decode_access_token(creds.credentials)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthenticated(error_details="Invalid or expired token")

    user = user_repository.get(db, id=user_id)
    if not user:
        logger.warning(f"Token válido para un usuario inexistente: {user_id}")
        raise Unauthenticated(error_details="Invalid token or user not found")

    return CurrentUser(id=user.id, email=user.email, role=user.role)


class RoleChecker:
    """
    Dependencia que solo deja pasar a usuarios con alguno de los roles dados.

    Uso:
        @router.get("/x", dependencies=[Depends(RoleChecker(UserRole.ADMIN))])
    """

    def __init__(self, *allowed_roles: UserRole):
        self.allowed_roles = allowed_roles

    def __call__(self, current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in self.allowed_roles:
            roles = " or ".join(role.value.lower() for role in self.allowed_roles)
            logger.info(f"Acceso denegado al usuario {current_user.id} con rol {current_user.role.value}")
            raise Forbidden(error_details=f"You must be a {roles} to perform this action.")
        return current_user


require_admin = RoleChecker(UserRole.ADMIN)
require_trainer = RoleChecker(UserRole.TRAINER)
require_trainee = RoleChecker(UserRole.TRAINEE)
