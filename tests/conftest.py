import os

# Configuración de entorno ANTES de importar la aplicación
os.environ["SECRET_KEY"] = "test-secret-key-for-gym-management"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_DIR"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GYM_TIMEZONE"] = "UTC"
os.environ["AUTO_CREATE_TABLES"] = "false"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from gym_management.core.security import create_access_token, get_password_hash
from gym_management.core.timezone_utils import get_today_in_gym_timezone
from gym_management.db.base import Base
from gym_management.db.session import create_db_engine
from gym_management.main import create_app
from gym_management.models.schedule import Booking, ClassSchedule
from gym_management.models.user import User, UserRole

DEFAULT_PASSWORD = "secret123"


# Base de datos en memoria nueva para cada test
@pytest.fixture(scope="function")
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def app(engine):
    return create_app(engine=engine)


@pytest.fixture(scope="function")
def client(app):
    """
    Cliente de prueba. Las peticiones usan la factoría de sesiones de la app,
    enlazada al engine en memoria del test.
    """
    return TestClient(app)


@pytest.fixture(scope="function")
def db(app):
    """Sesión para preparar datos directamente en la base de datos del test."""
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def today():
    return get_today_in_gym_timezone("UTC")


@pytest.fixture(scope="function")
def future_date(today) -> date:
    return today + timedelta(days=7)


@pytest.fixture(scope="function")
def past_date(today) -> date:
    return today - timedelta(days=1)


def make_user(db, email: str, role: UserRole, first_name: str = "Test", last_name: str = "User") -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(DEFAULT_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_schedule(
    db, trainer: User, day: date, start_time: str, end_time: str, title: str = "Strength Class"
) -> ClassSchedule:
    """Inserta un horario sin pasar por las reglas (para preparar escenarios)."""
    schedule = ClassSchedule(
        title=title,
        date=day,
        start_time=start_time,
        end_time=end_time,
        trainer_id=trainer.id,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def make_booking(db, trainee: User, schedule: ClassSchedule) -> Booking:
    booking = Booking(trainee_id=trainee.id, class_schedule_id=schedule.id)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def auth_headers_for(user: User) -> dict:
    token = create_access_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_user(db):
    return make_user(db, "admin@gym.com", UserRole.ADMIN, "Admin", "Admin")


@pytest.fixture(scope="function")
def trainer_user(db):
    return make_user(db, "trainer1@gym.com", UserRole.TRAINER, "Trainer", "One")


@pytest.fixture(scope="function")
def other_trainer(db):
    return make_user(db, "trainer2@gym.com", UserRole.TRAINER, "Trainer", "Two")


@pytest.fixture(scope="function")
def trainee_user(db):
    return make_user(db, "trainee1@gym.com", UserRole.TRAINEE, "Trainee", "One")


@pytest.fixture(scope="function")
def other_trainee(db):
    return make_user(db, "trainee2@gym.com", UserRole.TRAINEE, "Trainee", "Two")


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture(scope="function")
def trainer_headers(trainer_user):
    return auth_headers_for(trainer_user)


@pytest.fixture(scope="function")
def trainee_headers(trainee_user):
    return auth_headers_for(trainee_user)


# Factorías para preparar escenarios dentro de los tests
@pytest.fixture(scope="function")
def user_factory(db):
    def _make(email: str, role: UserRole = UserRole.TRAINEE, **kwargs) -> User:
        return make_user(db, email, role, **kwargs)
    return _make


@pytest.fixture(scope="function")
def schedule_factory(db):
    def _make(trainer: User, day: date, start_time: str, end_time: str, **kwargs) -> ClassSchedule:
        return make_schedule(db, trainer, day, start_time, end_time, **kwargs)
    return _make


@pytest.fixture(scope="function")
def booking_factory(db):
    def _make(trainee: User, schedule: ClassSchedule) -> Booking:
        return make_booking(db, trainee, schedule)
    return _make


@pytest.fixture(scope="function")
def headers_for():
    return auth_headers_for
