from typing import List, Optional
import datetime as dt

from pydantic import computed_field, field_validator

from gym_management.core.timezone_utils import format_clock_time, normalize_clock_time, parse_calendar_date
from gym_management.schemas.base import CamelModel
from gym_management.schemas.user import UserSummary
from gym_management.models.schedule import ScheduleState


def _parse_date(value):
    if value is None:
        return None
    try:
        return parse_calendar_date(value)
    except ValueError:
        raise ValueError("Valid date is required")


def _parse_time(value, label: str):
    """Validar y normalizar strings de tiempo en formato HH:MM"""
    if value is None:
        return None
    try:
        return normalize_clock_time(value)
    except ValueError:
        raise ValueError(f"Valid {label} time (HH:MM) is required")


def _check_title(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 3:
        raise ValueError("Title must be at least 3 characters")
    return value


# ClassSchedule schemas
class ClassScheduleCreate(CamelModel):
    title: str
    description: Optional[str] = None
    date: dt.date
    start_time: str
    end_time: str
    trainer_id: int

    @field_validator("title")
    def check_title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("date", mode="before")
    def parse_date(cls, v):
        return _parse_date(v)

    @field_validator("start_time", mode="before")
    def parse_start_time(cls, v):
        return _parse_time(v, "start")

    @field_validator("end_time", mode="before")
    def parse_end_time(cls, v):
        return _parse_time(v, "end")


class ClassScheduleUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    trainer_id: Optional[int] = None

    @field_validator("title")
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_title(v)

    @field_validator("date", mode="before")
    def parse_date(cls, v):
        return _parse_date(v)

    @field_validator("start_time", mode="before")
    def parse_start_time(cls, v):
        return _parse_time(v, "start")

    @field_validator("end_time", mode="before")
    def parse_end_time(cls, v):
        return _parse_time(v, "end")


class ClassSchedule(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    date: dt.date
    start_time: str
    end_time: str
    max_trainees: int
    trainer_id: int
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @computed_field(alias="displayTime")
    @property
    def display_time(self) -> str:
        return f"{format_clock_time(self.start_time)} - {format_clock_time(self.end_time)}"


class ClassScheduleWithTrainer(ClassSchedule):
    trainer: UserSummary


# Booking schemas
class BookingCreate(CamelModel):
    class_schedule_id: int


class BookingWithTrainee(CamelModel):
    id: int
    trainee_id: int
    class_schedule_id: int
    created_at: Optional[dt.datetime] = None
    trainee: UserSummary


class Booking(CamelModel):
    id: int
    trainee_id: int
    class_schedule_id: int
    created_at: Optional[dt.datetime] = None
    class_schedule: ClassScheduleWithTrainer


class ClassScheduleDetail(ClassScheduleWithTrainer):
    bookings: List[BookingWithTrainee] = []


class AvailableSchedule(ClassScheduleWithTrainer):
    booking_count: int
    available_slots: int
    is_available: bool
    state: ScheduleState
