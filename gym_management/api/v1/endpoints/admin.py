"""
Administration Module - API Endpoints

Trainer accounts and the class timetable. Every endpoint requires the ADMIN
role. Schedule creation and updates go through the scheduling rules: fixed
two hour duration, at most five classes per day and no overlapping classes
on the same date.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gym_management.core.auth import require_admin
from gym_management.db.session import get_db
from gym_management.schemas.response import SuccessResponse, success_response
from gym_management.schemas.schedule import (
    ClassScheduleCreate,
    ClassScheduleDetail,
    ClassScheduleUpdate,
    ClassScheduleWithTrainer,
)
from gym_management.schemas.user import TrainerCreate, User
from gym_management.services.schedule import schedule_service
from gym_management.services.user import user_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post(
    "/trainers",
    response_model=SuccessResponse[User],
    status_code=status.HTTP_201_CREATED,
)
def create_trainer(
    trainer_in: TrainerCreate,
    db: Session = Depends(get_db),
) -> Any:
    """
    Create a trainer account. The role is always TRAINER whatever the body says.

    Raises:
        400: invalid fields or email already registered
    """
    trainer = user_service.create_trainer(db, trainer_in)
    return success_response("Trainer created successfully", User.model_validate(trainer), status.HTTP_201_CREATED)


@router.get("/trainers", response_model=SuccessResponse[List[User]])
def list_trainers(db: Session = Depends(get_db)) -> Any:
    """List every trainer account."""
    trainers = user_service.get_trainers(db)
    return success_response(
        "Trainers retrieved successfully", [User.model_validate(t) for t in trainers]
    )


@router.post(
    "/schedules",
    response_model=SuccessResponse[ClassScheduleWithTrainer],
    status_code=status.HTTP_201_CREATED,
)
def create_schedule(
    schedule_in: ClassScheduleCreate,
    db: Session = Depends(get_db),
) -> Any:
    """
    Create a class schedule for a trainer.

    Checks run in this order and the first failure is returned:
    duration of exactly 2 hours, trainer exists, start not in the past,
    daily limit of 5 schedules, no overlap with another schedule that day.

    Raises:
        400: validation or scheduling rule failure
        404: trainer not found
    """
    schedule = schedule_service.create_schedule(db, schedule_in)
    return success_response(
        "Class schedule created successfully",
        ClassScheduleWithTrainer.model_validate(schedule),
        status.HTTP_201_CREATED,
    )


@router.get("/schedules", response_model=SuccessResponse[List[ClassScheduleDetail]])
def list_schedules(db: Session = Depends(get_db)) -> Any:
    """All schedules with trainer and bookings, by date and start time."""
    schedules = schedule_service.get_all_schedules(db)
    return success_response(
        "Class schedules retrieved successfully",
        [ClassScheduleDetail.model_validate(s) for s in schedules],
    )


@router.put("/schedules/{schedule_id}", response_model=SuccessResponse[ClassScheduleWithTrainer])
def update_schedule(
    schedule_id: int,
    schedule_in: ClassScheduleUpdate,
    db: Session = Depends(get_db),
) -> Any:
    """
    Partially update a schedule. Changing the date, times or trainer runs the
    same checks as creation, ignoring the schedule being updated.

    Raises:
        404: schedule or trainer not found
    """
    schedule = schedule_service.update_schedule(db, schedule_id, schedule_in)
    return success_response(
        "Class schedule updated successfully", ClassScheduleWithTrainer.model_validate(schedule)
    )


@router.delete("/schedules/{schedule_id}", response_model=SuccessResponse[Any])
def delete_schedule(schedule_id: int, db: Session = Depends(get_db)) -> Any:
    """Delete a schedule and all of its bookings."""
    schedule_service.delete_schedule(db, schedule_id)
    return success_response("Class schedule deleted successfully")
