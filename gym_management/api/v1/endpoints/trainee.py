"""
Trainee Module - API Endpoints

Browsing available classes, booking and cancelling places, and profile
updates for the authenticated trainee.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gym_management.core.auth import CurrentUser, require_trainee
from gym_management.db.session import get_db
from gym_management.schemas.response import SuccessResponse, success_response
from gym_management.schemas.schedule import AvailableSchedule, Booking, BookingCreate
from gym_management.schemas.user import User, UserProfileUpdate
from gym_management.services.booking import booking_service
from gym_management.services.schedule import schedule_service
from gym_management.services.user import user_service

router = APIRouter()


@router.get("/schedules/available", response_model=SuccessResponse[List[AvailableSchedule]])
def available_schedules(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainee),
) -> Any:
    """
    Schedules from today onwards with ``availableSlots``, ``isAvailable`` and
    ``state`` (OPEN, FULL or PAST).
    """
    schedules = schedule_service.get_available_schedules(db)
    return success_response("Available schedules retrieved successfully", schedules)


@router.post(
    "/bookings",
    response_model=SuccessResponse[Booking],
    status_code=status.HTTP_201_CREATED,
)
def book_class(
    booking_in: BookingCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainee),
) -> Any:
    """
    Book a place in a class.

    Checks run in this order and the first failure is returned:
    schedule exists, not started, not full, not already booked, no other
    booking of the trainee overlapping it on the same date.

    Raises:
        400: past, full, duplicate or overlapping booking
        404: schedule not found
    """
    booking = booking_service.book_class(db, current_user.id, booking_in.class_schedule_id)
    return success_response("Class booked successfully", Booking.model_validate(booking), status.HTTP_201_CREATED)


@router.get("/bookings", response_model=SuccessResponse[List[Booking]])
def my_bookings(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainee),
) -> Any:
    """The trainee's bookings, newest first."""
    bookings = booking_service.get_trainee_bookings(db, current_user.id)
    return success_response(
        "Your bookings retrieved successfully", [Booking.model_validate(b) for b in bookings]
    )


@router.delete("/bookings/{booking_id}", response_model=SuccessResponse[Any])
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainee),
) -> Any:
    """
    Cancel one of the trainee's own bookings before the class starts.

    Raises:
        400: the class already started
        404: booking not found or owned by another trainee
    """
    booking_service.cancel_booking(db, current_user.id, booking_id)
    return success_response("Booking cancelled successfully")


@router.put("/profile", response_model=SuccessResponse[User])
def update_profile(
    profile_in: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_trainee),
) -> Any:
    """
    Update first name, last name or email.

    Raises:
        400: email already used by another account
    """
    user = user_service.update_user_profile(db, current_user.id, profile_in)
    return success_response("Profile updated successfully", User.model_validate(user))
