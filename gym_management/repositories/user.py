from typing import List, Optional

from sqlalchemy.orm import Session

from gym_management.models.user import User, UserRole
from gym_management.repositories.base import BaseRepository
from gym_management.schemas.user import UserCreate, UserProfileUpdate


class UserRepository(BaseRepository[User, UserCreate, UserProfileUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        """
        Obtener un usuario por email.
        """
        return db.query(User).filter(User.email == email).first()

    def get_by_role(
        self, db: Session, *, role: UserRole, skip: int = 0, limit: Optional[int] = 100
    ) -> List[User]:
        """
        Obtener usuarios filtrados por rol, en orden de alta.
        """
        return (
            db.query(User)
            .filter(User.role == role)
            .order_by(User.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_with_role(self, db: Session, *, user_id: int, role: UserRole) -> Optional[User]:
        """Obtener un usuario solo si tiene el rol indicado"""
        return db.query(User).filter(User.id == user_id, User.role == role).first()

    def email_taken_by_other(self, db: Session, *, email: str, user_id: int) -> bool:
        query = db.query(User.id).filter(User.email == email, User.id != user_id)
        return db.query(query.exists()).scalar()


user_repository = UserRepository(User)
