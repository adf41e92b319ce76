from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from gym_management.core.config import get_settings
from gym_management.core.exceptions import BadRequestError, NotFoundError, PastSchedule
from gym_management.core.timezone_utils import (
    combine_in_gym_timezone,
    get_current_time_in_gym_timezone,
    get_today_in_gym_timezone,
)
from gym_management.models.schedule import ClassSchedule
from gym_management.models.user import UserRole
from gym_management.repositories.base import commit_or_conflict
from gym_management.repositories.schedule import class_schedule_repository
from gym_management.repositories.user import user_repository
from gym_management.schemas.schedule import (
    AvailableSchedule,
    ClassScheduleCreate,
    ClassScheduleUpdate,
    ClassScheduleWithTrainer,
)
from gym_management.services import scheduling_rules

logger = logging.getLogger(__name__)

# Campos cuyo cambio obliga a revalidar la franja del horario
WINDOW_FIELDS = ("date", "start_time", "end_time", "trainer_id")
# Campos obligatorios del horario: un null explícito en la actualización se ignora
REQUIRED_FIELDS = ("title", "date", "start_time", "end_time", "trainer_id")


class ClassScheduleService:
    def _check_trainer(self, db: Session, trainer_id: int) -> None:
        if not user_repository.get_with_role(db, user_id=trainer_id, role=UserRole.TRAINER):
            raise NotFoundError("Trainer not found")

    def _check_window(
        self, db: Session, *, values: Dict[str, Any], exclude_id: Optional[int] = None
    ) -> None:
        """
        Valida una franja (fecha, inicio, fin, entrenador) contra los horarios
        existentes. El orden de las comprobaciones es fijo: duración,
        entrenador, pasado, límite diario y solape.

        Toma el lock de la fecha antes de contar para que dos altas
        simultáneas del mismo día no pasen ambas la comprobación.
        """
        scheduling_rules.validate_duration(values["start_time"], values["end_time"])
        self._check_trainer(db, values["trainer_id"])

        tz = get_settings().GYM_TIMEZONE
        scheduling_rules.check_not_past(
            combine_in_gym_timezone(values["date"], values["start_time"], tz),
            get_current_time_in_gym_timezone(tz),
            PastSchedule("Cannot create schedules in the past"),
        )

        class_schedule_repository.lock_date(db, date_value=values["date"])
        same_day = class_schedule_repository.get_by_date(db, date_value=values["date"])
        scheduling_rules.check_schedule_admissible(
            values["start_time"], values["end_time"], same_day, exclude_id=exclude_id
        )

    def create_schedule(self, db: Session, schedule_in: ClassScheduleCreate) -> ClassSchedule:
        """
        Crear un horario de clase tras validar su franja.

        Raises:
            InvalidDuration, NotFoundError, PastSchedule, DailyLimitExceeded, TimeConflict
        """
        values = schedule_in.model_dump()
        try:
            self._check_window(db, values=values)
        except BadRequestError as e:
            logger.info(f"Horario rechazado para {values['date']} {values['start_time']}: {e.message}")
            raise

        with commit_or_conflict(db):
            schedule = class_schedule_repository.create(db, obj_in=values)

        logger.info(f"Horario {schedule.id} creado para {schedule.date} {schedule.start_time}-{schedule.end_time}")
        return class_schedule_repository.get_with_details(db, schedule_id=schedule.id)

    def update_schedule(
        self, db: Session, schedule_id: int, schedule_in: ClassScheduleUpdate
    ) -> ClassSchedule:
        """
        Actualización parcial. Si cambia la fecha, la franja o el entrenador,
        el resultado combinado se valida con las mismas reglas que un alta,
        sin contar el propio horario.
        """
        schedule = class_schedule_repository.get(db, id=schedule_id)
        if not schedule:
            raise NotFoundError("Class schedule not found")

        update_data = {
            field: value
            for field, value in schedule_in.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }

        if any(field in update_data for field in WINDOW_FIELDS):
            merged = {field: update_data.get(field, getattr(schedule, field)) for field in WINDOW_FIELDS}
            try:
                self._check_window(db, values=merged, exclude_id=schedule.id)
            except BadRequestError as e:
                logger.info(f"Actualización del horario {schedule_id} rechazada: {e.message}")
                raise

        with commit_or_conflict(db):
            class_schedule_repository.update(db, db_obj=schedule, obj_in=update_data)

        logger.info(f"Horario {schedule_id} actualizado: {sorted(update_data)}")
        return class_schedule_repository.get_with_details(db, schedule_id=schedule_id)

    def delete_schedule(self, db: Session, schedule_id: int) -> None:
        """Eliminar un horario junto con sus reservas"""
        schedule = class_schedule_repository.get(db, id=schedule_id)
        if not schedule:
            raise NotFoundError("Class schedule not found")

        with commit_or_conflict(db):
            class_schedule_repository.remove(db, db_obj=schedule)
        logger.info(f"Horario {schedule_id} eliminado")

    def get_all_schedules(self, db: Session) -> List[ClassSchedule]:
        return class_schedule_repository.get_all_with_details(db)

    def get_trainer_schedules(self, db: Session, trainer_id: int) -> List[ClassSchedule]:
        return class_schedule_repository.get_by_trainer(db, trainer_id=trainer_id)

    def get_trainer_upcoming_schedules(self, db: Session, trainer_id: int) -> List[ClassSchedule]:
        today = get_today_in_gym_timezone(get_settings().GYM_TIMEZONE)
        return class_schedule_repository.get_upcoming_by_trainer(db, trainer_id=trainer_id, today=today)

    def get_trainer_schedule(self, db: Session, trainer_id: int, schedule_id: int) -> ClassSchedule:
        schedule = class_schedule_repository.get_with_details(db, schedule_id=schedule_id)
        if not schedule or schedule.trainer_id != trainer_id:
            raise NotFoundError("Schedule not found or you are not assigned to this schedule")
        return schedule

    def get_available_schedules(self, db: Session) -> List[AvailableSchedule]:
        """
        Horarios desde hoy (zona del gimnasio) con su ocupación y estado.
        Incluye los de hoy que ya empezaron, marcados como PAST.
        """
        tz = get_settings().GYM_TIMEZONE
        now = get_current_time_in_gym_timezone(tz)
        schedules = class_schedule_repository.get_available_from(db, today=now.date())

        result = []
        for schedule in schedules:
            booking_count = len(schedule.bookings)
            slots = scheduling_rules.availability(schedule.max_trainees, booking_count)
            state = scheduling_rules.schedule_state(
                scheduling_rules.schedule_start(schedule, tz),
                booking_count,
                schedule.max_trainees,
                now,
            )
            base = ClassScheduleWithTrainer.model_validate(schedule).model_dump()
            result.append(
                AvailableSchedule(
                    **base,
                    booking_count=booking_count,
                    available_slots=slots.available_slots,
                    is_available=slots.is_available,
                    state=state,
                )
            )
        return result


schedule_service = ClassScheduleService()
