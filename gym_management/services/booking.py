from typing import List
import logging

from sqlalchemy.orm import Session

from gym_management.core.config import get_settings
from gym_management.core.exceptions import BadRequestError, NotFoundError
from gym_management.core.timezone_utils import get_current_time_in_gym_timezone
from gym_management.models.schedule import Booking
from gym_management.repositories.base import commit_or_conflict
from gym_management.repositories.schedule import booking_repository, class_schedule_repository
from gym_management.repositories.user import user_repository
from gym_management.services import scheduling_rules

logger = logging.getLogger(__name__)


class BookingService:
    def book_class(self, db: Session, trainee_id: int, schedule_id: int) -> Booking:
        """
        Reservar una plaza de un horario para un alumno.

        Bloquea la fila del horario (capacidad y duplicados) y la del alumno
        (solapes con sus otras reservas) antes de comprobar; comprobaciones e
        inserción se confirman en la misma transacción.

        Raises:
            NotFoundError: el horario no existe
            PastSchedule, ScheduleFull, DuplicateBooking, TraineeTimeConflict
            StorageConflict: otra petición insertó la misma reserva
        """
        schedule = class_schedule_repository.get_for_update(db, id=schedule_id)
        if not schedule:
            raise NotFoundError("Class schedule not found")
        user_repository.get_for_update(db, id=trainee_id)

        tz = get_settings().GYM_TIMEZONE
        schedule_bookings = booking_repository.get_by_schedule(db, schedule_id=schedule.id)
        trainee_schedules = booking_repository.get_trainee_schedules_on_date(
            db, trainee_id=trainee_id, date_value=schedule.date
        )

        try:
            scheduling_rules.check_booking_admissible(
                trainee_id,
                schedule,
                schedule_bookings,
                trainee_schedules,
                get_current_time_in_gym_timezone(tz),
                tz,
            )
        except BadRequestError as e:
            logger.info(f"Reserva rechazada: alumno {trainee_id}, horario {schedule_id}: {e.message}")
            raise

        with commit_or_conflict(db):
            booking = booking_repository.create(
                db, obj_in={"trainee_id": trainee_id, "class_schedule_id": schedule.id}
            )

        logger.info(f"Reserva {booking.id} creada: alumno {trainee_id}, horario {schedule_id}")
        return booking_repository.get_with_details(db, booking_id=booking.id)

    def cancel_booking(self, db: Session, trainee_id: int, booking_id: int) -> None:
        """Cancelar una reserva propia antes de que empiece la clase"""
        booking = booking_repository.get_owned(db, booking_id=booking_id, trainee_id=trainee_id)
        if not booking:
            raise NotFoundError("Booking not found or you are not authorized to cancel it")

        tz = get_settings().GYM_TIMEZONE
        try:
            scheduling_rules.check_cancel_admissible(
                booking.class_schedule, get_current_time_in_gym_timezone(tz), tz
            )
        except BadRequestError as e:
            logger.info(f"Cancelación rechazada: reserva {booking_id}: {e.message}")
            raise

        with commit_or_conflict(db):
            booking_repository.remove(db, db_obj=booking)
        logger.info(f"Reserva {booking_id} cancelada por el alumno {trainee_id}")

    def get_trainee_bookings(self, db: Session, trainee_id: int) -> List[Booking]:
        return booking_repository.get_by_trainee(db, trainee_id=trainee_id)


booking_service = BookingService()
