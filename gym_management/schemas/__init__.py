from gym_management.schemas.user import (
    User, UserCreate, TrainerCreate, UserLogin, UserProfileUpdate, UserSummary, AuthPayload
)
from gym_management.schemas.schedule import (
    ClassSchedule,
    ClassScheduleCreate,
    ClassScheduleUpdate,
    ClassScheduleWithTrainer,
    ClassScheduleDetail,
    AvailableSchedule,
    Booking,
    BookingCreate,
    BookingWithTrainee,
)
from gym_management.schemas.response import SuccessResponse, ErrorResponse, success_response
