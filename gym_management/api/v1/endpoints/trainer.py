"""
Trainer Module - API Endpoints

Read-only views of the classes assigned to the authenticated trainer.
"""
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gym_management.core.auth import CurrentUser, require_trainer
from gym_management.db.session import get_db
from gym_management.schemas.response import SuccessResponse, success_response
from gym_management.schemas.schedule import ClassScheduleDetail
from gym_management.services.schedule import schedule_service

router = APIRouter()


@router.get("/schedules", response_model=SuccessResponse[List[ClassScheduleDetail]])
def my_schedules(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainer),
) -> Any:
    """All schedules assigned to the trainer, with their bookings."""
    schedules = schedule_service.get_trainer_schedules(db, current_user.id)
    return success_response(
        "Your class schedules retrieved successfully",
        [ClassScheduleDetail.model_validate(s) for s in schedules],
    )


@router.get("/schedules/upcoming", response_model=SuccessResponse[List[ClassScheduleDetail]])
def my_upcoming_schedules(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainer),
) -> Any:
    """Schedules dated today or later in the gym timezone."""
    schedules = schedule_service.get_trainer_upcoming_schedules(db, current_user.id)
    return success_response(
        "Upcoming schedules retrieved successfully",
        [ClassScheduleDetail.model_validate(s) for s in schedules],
    )


@router.get("/schedules/{schedule_id}", response_model=SuccessResponse[ClassScheduleDetail])
def my_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainer),
) -> Any:
    """
    One of the trainer's schedules.

    Raises:
        404: the schedule does not exist or belongs to another trainer
    """
    schedule = schedule_service.get_trainer_schedule(db, current_user.id, schedule_id)
    return success_response("Schedule retrieved successfully", ClassScheduleDetail.model_validate(schedule))
