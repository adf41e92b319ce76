from typing import List, Optional
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from gym_management.models.schedule import Booking, ClassSchedule
from gym_management.repositories.base import BaseRepository
from gym_management.schemas.schedule import BookingCreate, ClassScheduleCreate, ClassScheduleUpdate

# Espacio de nombres para los advisory locks por fecha
SCHEDULE_DATE_LOCK_NAMESPACE = 7301


class ClassScheduleRepository(BaseRepository[ClassSchedule, ClassScheduleCreate, ClassScheduleUpdate]):
    def lock_date(self, db: Session, *, date_value: date) -> None:
        """
        Serializa las altas y cambios de horarios de una misma fecha.

        En PostgreSQL toma un advisory lock de transacción por fecha; se libera
        con el commit o el rollback. En SQLite en fichero el ``BEGIN IMMEDIATE``
        con el que empieza la transacción ya bloquea (ver ``create_db_engine``).
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(
            select(func.pg_advisory_xact_lock(SCHEDULE_DATE_LOCK_NAMESPACE, date_value.toordinal()))
        )

    def get_by_date(self, db: Session, *, date_value: date) -> List[ClassSchedule]:
        """Todos los horarios de una fecha"""
        return (
            db.query(ClassSchedule)
            .filter(ClassSchedule.date == date_value)
            .order_by(ClassSchedule.start_time)
            .all()
        )

    def get_with_details(self, db: Session, *, schedule_id: int) -> Optional[ClassSchedule]:
        """Horario con entrenador y reservas (con su alumno) cargados"""
        return (
            db.query(ClassSchedule)
            .options(
                joinedload(ClassSchedule.trainer),
                selectinload(ClassSchedule.bookings).joinedload(Booking.trainee),
            )
            .filter(ClassSchedule.id == schedule_id)
            .first()
        )

    def get_all_with_details(self, db: Session) -> List[ClassSchedule]:
        """
        Todos los horarios con entrenador y reservas, ordenados por fecha y hora.
        """
        return (
            db.query(ClassSchedule)
            .options(
                joinedload(ClassSchedule.trainer),
                selectinload(ClassSchedule.bookings).joinedload(Booking.trainee),
            )
            .order_by(ClassSchedule.date, ClassSchedule.start_time)
            .all()
        )

    def get_by_trainer(self, db: Session, *, trainer_id: int) -> List[ClassSchedule]:
        """
        Obtener los horarios de un entrenador específico.

        Args:
            db: Sesión de base de datos
            trainer_id: ID del entrenador
        """
        return (
            db.query(ClassSchedule)
            .options(selectinload(ClassSchedule.bookings).joinedload(Booking.trainee))
            .filter(ClassSchedule.trainer_id == trainer_id)
            .order_by(ClassSchedule.date, ClassSchedule.start_time)
            .all()
        )

    def get_upcoming_by_trainer(self, db: Session, *, trainer_id: int, today: date) -> List[ClassSchedule]:
        """
        Horarios del entrenador desde ``today`` (incluido) en adelante.

        Args:
            db: Sesión de base de datos
            trainer_id: ID del entrenador
            today: fecha actual en la zona horaria del gimnasio
        """
        return (
            db.query(ClassSchedule)
            .options(selectinload(ClassSchedule.bookings).joinedload(Booking.trainee))
            .filter(ClassSchedule.trainer_id == trainer_id, ClassSchedule.date >= today)
            .order_by(ClassSchedule.date, ClassSchedule.start_time)
            .all()
        )

    def get_available_from(self, db: Session, *, today: date) -> List[ClassSchedule]:
        """Horarios desde ``today`` con entrenador y reservas para calcular disponibilidad"""
        return (
            db.query(ClassSchedule)
            .options(
                joinedload(ClassSchedule.trainer),
                selectinload(ClassSchedule.bookings),
            )
            .filter(ClassSchedule.date >= today)
            .order_by(ClassSchedule.date, ClassSchedule.start_time)
            .all()
        )


class BookingRepository(BaseRepository[Booking, BookingCreate, BookingCreate]):
    def get_by_schedule(self, db: Session, *, schedule_id: int) -> List[Booking]:
        """Reservas actuales de un horario"""
        return (
            db.query(Booking)
            .filter(Booking.class_schedule_id == schedule_id)
            .order_by(Booking.created_at, Booking.id)
            .all()
        )

    def get_trainee_schedules_on_date(
        self, db: Session, *, trainee_id: int, date_value: date
    ) -> List[ClassSchedule]:
        """Horarios que el alumno ya tiene reservados en una fecha"""
        return (
            db.query(ClassSchedule)
            .join(Booking, Booking.class_schedule_id == ClassSchedule.id)
            .filter(Booking.trainee_id == trainee_id, ClassSchedule.date == date_value)
            .all()
        )

    def get_by_trainee(self, db: Session, *, trainee_id: int) -> List[Booking]:
        """
        Reservas de un alumno con el horario y su entrenador, más recientes primero.
        """
        return (
            db.query(Booking)
            .options(joinedload(Booking.class_schedule).joinedload(ClassSchedule.trainer))
            .filter(Booking.trainee_id == trainee_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def get_owned(self, db: Session, *, booking_id: int, trainee_id: int) -> Optional[Booking]:
        """Reserva solo si pertenece al alumno indicado"""
        return (
            db.query(Booking)
            .options(joinedload(Booking.class_schedule))
            .filter(Booking.id == booking_id, Booking.trainee_id == trainee_id)
            .first()
        )

    def get_with_details(self, db: Session, *, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.class_schedule).joinedload(ClassSchedule.trainer))
            .filter(Booking.id == booking_id)
            .first()
        )


# Instantiate repositories
class_schedule_repository = ClassScheduleRepository(ClassSchedule)
booking_repository = BookingRepository(Booking)
