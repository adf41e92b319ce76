"""
Reservas y altas de horarios simultáneas contra SQLite en fichero: las
comprobaciones y la escritura de cada transacción no se intercalan.
"""
from datetime import date, timedelta
import threading
import time

import pytest

from gym_management.core.exceptions import DailyLimitExceeded, ScheduleFull
from gym_management.core.security import get_password_hash
from gym_management.db.base import Base
from gym_management.db.session import create_db_engine, create_session_factory
from gym_management.models.schedule import Booking, ClassSchedule
from gym_management.models.user import User, UserRole
from gym_management.schemas.schedule import ClassScheduleCreate
from gym_management.services import scheduling_rules
from gym_management.services.booking import booking_service
from gym_management.services.schedule import schedule_service

DAY = date.today() + timedelta(days=7)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'gym.db'}")
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()


def _user(email: str, role: UserRole) -> User:
    return User(
        email=email,
        hashed_password=get_password_hash("secret123"),
        first_name="Test",
        last_name="User",
        role=role,
    )


def _slow(check):
    # Ensancha la ventana entre comprobar y escribir
    def wrapper(*args, **kwargs):
        result = check(*args, **kwargs)
        time.sleep(0.3)
        return result
    return wrapper


def _run_concurrently(session_factory, *calls):
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(index, call):
        db = session_factory()
        try:
            barrier.wait(timeout=5)
            results[index] = call(db)
        except Exception as e:
            results[index] = e
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


def test_concurrent_bookings_never_exceed_capacity(session_factory, monkeypatch):
    db = session_factory()
    trainer = _user("trainer@gym.com", UserRole.TRAINER)
    members = [_user(f"member{i}@gym.com", UserRole.TRAINEE) for i in range(9)]
    late = [_user(f"late{i}@gym.com", UserRole.TRAINEE) for i in range(2)]
    db.add_all([trainer, *members, *late])
    db.flush()
    schedule = ClassSchedule(title="Spin", date=DAY, start_time="09:00", end_time="11:00", trainer_id=trainer.id)
    db.add(schedule)
    db.flush()
    db.add_all([Booking(trainee_id=m.id, class_schedule_id=schedule.id) for m in members])
    db.commit()
    schedule_id, late_ids = schedule.id, [u.id for u in late]
    db.close()

    monkeypatch.setattr(
        scheduling_rules, "check_booking_admissible", _slow(scheduling_rules.check_booking_admissible)
    )

    results = _run_concurrently(
        session_factory,
        *[lambda s, trainee_id=trainee_id: booking_service.book_class(s, trainee_id, schedule_id)
          for trainee_id in late_ids],
    )

    assert sum(isinstance(r, Booking) for r in results) == 1
    assert sum(isinstance(r, ScheduleFull) for r in results) == 1

    db = session_factory()
    try:
        assert db.query(Booking).filter(Booking.class_schedule_id == schedule_id).count() == 10
    finally:
        db.close()


def test_concurrent_schedule_creation_respects_daily_limit(session_factory, monkeypatch):
    db = session_factory()
    trainer = _user("trainer@gym.com", UserRole.TRAINER)
    db.add(trainer)
    db.flush()
    for start, end in [("00:00", "02:00"), ("02:00", "04:00"), ("04:00", "06:00"), ("06:00", "08:00")]:
        db.add(ClassSchedule(title="Early", date=DAY, start_time=start, end_time=end, trainer_id=trainer.id))
    db.commit()
    trainer_id = trainer.id
    db.close()

    monkeypatch.setattr(
        scheduling_rules, "check_schedule_admissible", _slow(scheduling_rules.check_schedule_admissible)
    )

    def create(start, end):
        schedule_in = ClassScheduleCreate(
            title="Late class", date=DAY, start_time=start, end_time=end, trainer_id=trainer_id
        )
        return lambda s: schedule_service.create_schedule(s, schedule_in)

    results = _run_concurrently(session_factory, create("10:00", "12:00"), create("14:00", "16:00"))

    assert sum(isinstance(r, ClassSchedule) for r in results) == 1
    assert sum(isinstance(r, DailyLimitExceeded) for r in results) == 1

    db = session_factory()
    try:
        assert db.query(ClassSchedule).filter(ClassSchedule.date == DAY).count() == 5
    finally:
        db.close()
