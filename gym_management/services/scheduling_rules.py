"""
Reglas de admisibilidad de horarios y reservas.

Lógica pura sin acceso a base de datos ni a HTTP: recibe los horarios y
reservas ya consultados (objetos ORM o cualquier objeto con los mismos
atributos) y lanza el primer error de dominio que aplique. Devolver ``None``
significa que la operación es admisible.

Las horas son cadenas "HH:MM" de 24 horas sobre la misma fecha. Una franja
que cruza la medianoche no está soportada y se rechaza como duración
inválida.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from gym_management.core.exceptions import (
    DailyLimitExceeded,
    DuplicateBooking,
    InvalidDuration,
    PastSchedule,
    ScheduleFull,
    TimeConflict,
    TraineeTimeConflict,
)
from gym_management.core.timezone_utils import combine_in_gym_timezone, parse_clock_time
from gym_management.models.schedule import ScheduleState

MAX_SCHEDULES_PER_DAY = 5
REQUIRED_DURATION = timedelta(hours=2)

# Fecha de referencia común para restar horas de reloj
_REFERENCE_DAY = date(2000, 1, 1)


@dataclass(frozen=True)
class Availability:
    available_slots: int
    is_available: bool


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """
    True si la franja existente [start_a, end_a) choca con la candidata
    [start_b, end_b). Semántica semiabierta: terminar justo cuando la otra
    empieza no es conflicto.
    """
    s, e = parse_clock_time(start_a), parse_clock_time(end_a)
    S, E = parse_clock_time(start_b), parse_clock_time(end_b)
    engulfs_start = s <= S < e
    engulfs_end = s < E <= e
    engulfed = S <= s and e <= E
    return engulfs_start or engulfs_end or engulfed


def duration_of(start_time: str, end_time: str) -> timedelta:
    start = datetime.combine(_REFERENCE_DAY, parse_clock_time(start_time))
    end = datetime.combine(_REFERENCE_DAY, parse_clock_time(end_time))
    return end - start


def validate_duration(start_time: str, end_time: str) -> None:
    """Rechaza toda franja que no dure exactamente 2 horas."""
    if duration_of(start_time, end_time) != REQUIRED_DURATION:
        raise InvalidDuration()


def schedule_start(schedule, gym_timezone: str) -> datetime:
    return combine_in_gym_timezone(schedule.date, schedule.start_time, gym_timezone)


def check_not_past(starts_at: datetime, now: datetime, error: Optional[PastSchedule] = None) -> None:
    if starts_at < now:
        raise error or PastSchedule()


def check_schedule_admissible(
    start_time: str,
    end_time: str,
    same_day_schedules: Iterable,
    exclude_id: Optional[int] = None,
) -> None:
    """
    Decide si se puede crear (o mover) un horario a una franja de un día.

    ``same_day_schedules`` son todos los horarios existentes en esa fecha.
    Con ``exclude_id`` el propio horario que se actualiza no cuenta ni para
    el límite diario ni para los solapes.

    Raises:
        DailyLimitExceeded: ya hay 5 horarios ese día
        TimeConflict: la franja se solapa con otro horario del día
    """
    others = [s for s in same_day_schedules if exclude_id is None or s.id != exclude_id]

    if len(others) >= MAX_SCHEDULES_PER_DAY:
        raise DailyLimitExceeded()

    for existing in others:
        if overlaps(existing.start_time, existing.end_time, start_time, end_time):
            raise TimeConflict()


def check_booking_admissible(
    trainee_id: int,
    schedule,
    schedule_bookings: Sequence,
    trainee_schedules: Iterable,
    now: datetime,
    gym_timezone: str,
) -> None:
    """
    Decide si un alumno puede reservar un horario. El primer fallo gana, en
    este orden: pasado, completo, duplicado, solape con otra reserva.

    Args:
        trainee_id: alumno que reserva
        schedule: horario ya resuelto (la búsqueda y el 404 son del llamador)
        schedule_bookings: reservas actuales de ese horario
        trainee_schedules: horarios que el alumno ya tiene reservados
        now: instante de la escritura (aware)
        gym_timezone: zona en la que se interpretan fecha y hora del horario
    """
    check_not_past(schedule_start(schedule, gym_timezone), now)

    if len(schedule_bookings) >= schedule.max_trainees:
        raise ScheduleFull()

    if any(b.trainee_id == trainee_id for b in schedule_bookings):
        raise DuplicateBooking()

    for booked in trainee_schedules:
        if booked.id == schedule.id or booked.date != schedule.date:
            continue
        if overlaps(booked.start_time, booked.end_time, schedule.start_time, schedule.end_time):
            raise TraineeTimeConflict()


def check_cancel_admissible(schedule, now: datetime, gym_timezone: str) -> None:
    check_not_past(
        schedule_start(schedule, gym_timezone),
        now,
        PastSchedule("Cannot cancel past bookings"),
    )


def availability(max_trainees: int, booking_count: int) -> Availability:
    available_slots = max_trainees - booking_count
    return Availability(available_slots=available_slots, is_available=available_slots > 0)


def schedule_state(starts_at: datetime, booking_count: int, max_trainees: int, now: datetime) -> ScheduleState:
    # PAST es terminal y prevalece sobre la ocupación
    if now >= starts_at:
        return ScheduleState.PAST
    if availability(max_trainees, booking_count).is_available:
        return ScheduleState.OPEN
    return ScheduleState.FULL
