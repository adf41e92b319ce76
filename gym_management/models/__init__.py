from gym_management.models.user import User, UserRole
from gym_management.models.schedule import ClassSchedule, Booking, ScheduleState

__all__ = ["User", "UserRole", "ClassSchedule", "Booking", "ScheduleState"]
