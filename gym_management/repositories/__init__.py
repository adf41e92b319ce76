from gym_management.repositories.user import user_repository
from gym_management.repositories.schedule import class_schedule_repository, booking_repository
