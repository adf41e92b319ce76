from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from gym_management.core.exceptions import (
    BadRequestError,
    EmailAlreadyRegistered,
    NotFoundError,
    Unauthenticated,
)
from gym_management.core.security import create_access_token, get_password_hash, verify_password
from gym_management.models.user import User as UserModel, UserRole
from gym_management.repositories.base import commit_or_conflict
from gym_management.repositories.user import user_repository
from gym_management.schemas.user import UserCreate, UserProfileUpdate

logger = logging.getLogger(__name__)  # Logger a nivel de módulo


class UserService:
    def issue_token(self, user: UserModel) -> str:
        return create_access_token(user.id, user.email, user.role.value)

    def create_user(self, db: Session, user_in: UserCreate, role: Optional[UserRole] = None) -> UserModel:
        """
        Crear un usuario con la contraseña hasheada.

        Args:
            db: Sesión de base de datos
            user_in: Datos del usuario
            role: Rol a forzar (p. ej. TRAINER desde el panel de administración)

        Raises:
            EmailAlreadyRegistered: si el email ya existe
        """
        if user_repository.get_by_email(db, email=user_in.email):
            raise EmailAlreadyRegistered()

        user_data = user_in.model_dump(exclude={"password"})
        user_data["hashed_password"] = get_password_hash(user_in.password)
        if role is not None:
            user_data["role"] = role

        with commit_or_conflict(db):
            user = user_repository.create(db, obj_in=user_data)

        logger.info(f"Usuario {user.id} creado con rol {user.role.value}")
        return user

    def register(self, db: Session, user_in: UserCreate) -> Tuple[UserModel, str]:
        user = self.create_user(db, user_in)
        return user, self.issue_token(user)

    def authenticate(self, db: Session, email: str, password: str) -> Tuple[UserModel, str]:
        """
        Verificar credenciales y emitir token.

        Raises:
            Unauthenticated: email desconocido o contraseña incorrecta (mismo mensaje)
        """
        user = user_repository.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            logger.info(f"Intento de login fallido para {email}")
            raise Unauthenticated("Invalid email or password")
        return user, self.issue_token(user)

    def create_trainer(self, db: Session, trainer_in: UserCreate) -> UserModel:
        return self.create_user(db, trainer_in, role=UserRole.TRAINER)

    def get_trainers(self, db: Session) -> List[UserModel]:
        return user_repository.get_by_role(db, role=UserRole.TRAINER, limit=None)

    def get_profile(self, db: Session, user_id: int) -> UserModel:
        user = user_repository.get(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user_profile(self, db: Session, user_id: int, profile_in: UserProfileUpdate) -> UserModel:
        """
        Actualizar nombre, apellido y email del usuario. Los campos no enviados
        (o enviados como null) no se modifican.
        """
        user = self.get_profile(db, user_id)
        update_data = {k: v for k, v in profile_in.model_dump(exclude_unset=True).items() if v is not None}

        new_email = update_data.get("email")
        if new_email and user_repository.email_taken_by_other(db, email=new_email, user_id=user_id):
            raise BadRequestError("Email is already taken")

        with commit_or_conflict(db):
            user_repository.update(db, db_obj=user, obj_in=update_data)
        db.refresh(user)
        return user

    def ensure_first_superuser(self, db: Session, email: str, password: str) -> UserModel:
        """Crear el administrador inicial si todavía no existe"""
        user = user_repository.get_by_email(db, email=email)
        if user:
            return user
        with commit_or_conflict(db):
            user = user_repository.create(
                db,
                obj_in={
                    "email": email,
                    "hashed_password": get_password_hash(password),
                    "first_name": "Admin",
                    "last_name": "User",
                    "role": UserRole.ADMIN,
                },
            )
        logger.info(f"Administrador inicial creado: {email}")
        return user


user_service = UserService()
