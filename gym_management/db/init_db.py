"""
Creación de tablas y datos de demostración.

Uso:
    python -m gym_management.db.init_db           # solo crea las tablas
    python -m gym_management.db.init_db --seed    # crea tablas y carga datos demo
"""
from datetime import timedelta
import argparse
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from gym_management.core.config import get_settings
from gym_management.core.security import get_password_hash
from gym_management.core.timezone_utils import get_today_in_gym_timezone
from gym_management.db.base import Base
from gym_management.db.session import create_db_engine, create_session_factory
from gym_management.models.schedule import Booking, ClassSchedule
from gym_management.models.user import User, UserRole
from gym_management.repositories.user import user_repository

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("admin@gym.com", "admin123", "Admin", "Admin", UserRole.ADMIN),
    ("trainer1@gym.com", "trainer123", "Trainer", "One", UserRole.TRAINER),
    ("trainer2@gym.com", "trainer123", "Trainer", "Two", UserRole.TRAINER),
    ("trainee1@gym.com", "trainee123", "Trainee", "One", UserRole.TRAINEE),
    ("trainee2@gym.com", "trainee123", "Trainee", "Two", UserRole.TRAINEE),
]


def create_tables(engine: Engine) -> None:
    """Crea las tablas que falten. No modifica tablas existentes."""
    Base.metadata.create_all(bind=engine)
    logger.info("Tablas verificadas/creadas")


def _get_or_create_user(db: Session, email: str, password: str, first_name: str, last_name: str, role: UserRole) -> User:
    user = user_repository.get_by_email(db, email=email)
    if user:
        return user
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    db.flush()
    return user


def seed_demo_data(db: Session) -> None:
    """
    Carga usuarios de ejemplo (idempotente por email) y, si aún no hay
    horarios, dos clases para mañana con dos reservas en la primera.
    """
    users = {email: _get_or_create_user(db, email, *rest) for email, *rest in DEMO_USERS}

    if db.query(ClassSchedule).first() is not None:
        db.commit()
        logger.info("Ya existen horarios; solo se han verificado los usuarios demo")
        return

    tomorrow = get_today_in_gym_timezone(get_settings().GYM_TIMEZONE) + timedelta(days=1)
    morning = ClassSchedule(
        title="Morning Yoga Session",
        description="Relaxing morning yoga session",
        date=tomorrow,
        start_time="09:00",
        end_time="11:00",
        trainer_id=users["trainer1@gym.com"].id,
    )
    cardio = ClassSchedule(
        title="Cardio Workout Session",
        description="High-intensity cardio session",
        date=tomorrow,
        start_time="14:00",
        end_time="16:00",
        trainer_id=users["trainer2@gym.com"].id,
    )
    db.add_all([morning, cardio])
    db.flush()

    db.add_all([
        Booking(trainee_id=users["trainee1@gym.com"].id, class_schedule_id=morning.id),
        Booking(trainee_id=users["trainee2@gym.com"].id, class_schedule_id=morning.id),
    ])
    db.commit()
    logger.info(f"Datos demo cargados: {len(users)} usuarios, 2 horarios para {tomorrow}, 2 reservas")


def main() -> None:
    parser = argparse.ArgumentParser(description="Inicializa la base de datos de Gym Management API")
    parser.add_argument("--seed", action="store_true", help="cargar datos de demostración")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    try:
        create_tables(engine)
        if args.seed:
            db = create_session_factory(engine)()
            try:
                seed_demo_data(db)
            except Exception:
                db.rollback()
                logger.error("Error cargando datos demo", exc_info=True)
                raise
            finally:
                db.close()
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
