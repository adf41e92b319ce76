from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Date, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from gym_management.db.base_class import Base

# Capacidad fija de cada horario de clase
DEFAULT_MAX_TRAINEES = 10


class ScheduleState(str, enum.Enum):
    OPEN = "OPEN"      # quedan plazas
    FULL = "FULL"      # sin plazas
    PAST = "PAST"      # ya empezó: no se reserva ni se cancela


class ClassSchedule(Base):
    """Clase programada en una fecha y franja horaria, impartida por un entrenador"""
    __tablename__ = "class_schedule"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # "HH:MM" 24h con ceros
    end_time = Column(String(5), nullable=False)  # "HH:MM" 24h con ceros
    max_trainees = Column(Integer, nullable=False, default=DEFAULT_MAX_TRAINEES)
    trainer_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)

    # Relaciones
    trainer = relationship("User", back_populates="schedules")
    bookings = relationship(
        "Booking",
        back_populates="class_schedule",
        cascade="all, delete-orphan",
        order_by="Booking.created_at",
    )

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("max_trainees > 0", name="check_max_trainees_positive"),
    )


class Booking(Base):
    """Reserva de un alumno en un horario de clase"""
    __tablename__ = "booking"

    id = Column(Integer, primary_key=True, index=True)
    trainee_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    class_schedule_id = Column(
        Integer, ForeignKey("class_schedule.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relaciones
    trainee = relationship("User", back_populates="bookings")
    class_schedule = relationship("ClassSchedule", back_populates="bookings")

    # Un alumno no puede reservar dos veces el mismo horario
    __table_args__ = (
        UniqueConstraint("trainee_id", "class_schedule_id", name="uq_booking_trainee_schedule"),
    )
