# Importar todos los modelos para que Base.metadata los conozca
from gym_management.db.base_class import Base  # noqa
from gym_management.models.user import User  # noqa
from gym_management.models.schedule import ClassSchedule, Booking  # noqa
