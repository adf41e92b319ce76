from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from gym_management.db.base_class import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"        # Administrador: gestiona entrenadores y horarios
    TRAINER = "TRAINER"    # Entrenador: imparte las clases asignadas
    TRAINEE = "TRAINEE"    # Alumno: reserva plazas en las clases


class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    # El rol se fija al crear el usuario y no se modifica después
    role = Column(Enum(UserRole), nullable=False, default=UserRole.TRAINEE, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    schedules = relationship("ClassSchedule", back_populates="trainer")
    bookings = relationship("Booking", back_populates="trainee", cascade="all, delete-orphan")
