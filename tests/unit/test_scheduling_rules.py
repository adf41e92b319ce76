from datetime import date, datetime, timedelta
from itertools import product
from types import SimpleNamespace

import pytest
import pytz

from gym_management.core.exceptions import (
    DailyLimitExceeded,
    DuplicateBooking,
    InvalidDuration,
    PastSchedule,
    ScheduleFull,
    TimeConflict,
    TraineeTimeConflict,
)
from gym_management.models.schedule import ScheduleState
from gym_management.services import scheduling_rules
from gym_management.services.scheduling_rules import (
    availability,
    check_booking_admissible,
    check_cancel_admissible,
    check_schedule_admissible,
    overlaps,
    schedule_state,
    validate_duration,
)

TZ = "UTC"
CLASS_DAY = date(2030, 3, 15)


def _schedule(id, start, end, day=CLASS_DAY, max_trainees=10):
    return SimpleNamespace(id=id, date=day, start_time=start, end_time=end, max_trainees=max_trainees)


def _bookings(count, first_trainee_id=100):
    return [SimpleNamespace(trainee_id=first_trainee_id + i) for i in range(count)]


def _at(day, hour, minute=0):
    return pytz.utc.localize(datetime(day.year, day.month, day.day, hour, minute))


DAY_BEFORE = _at(CLASS_DAY - timedelta(days=1), 12)


# --- overlaps ---

def test_overlaps_is_symmetric_and_matches_interval_intersection():
    times = [f"{h:02d}:{m:02d}" for h in range(8, 15) for m in (0, 30)]
    windows = [(s, e) for s, e in product(times, times) if s < e]
    for (s, e), (S, E) in product(windows, windows):
        assert overlaps(s, e, S, E) == overlaps(S, E, s, e)
        assert overlaps(s, e, S, E) == (s < E and S < e)


def test_touching_windows_do_not_overlap():
    assert not overlaps("10:00", "12:00", "12:00", "14:00")
    assert not overlaps("12:00", "14:00", "10:00", "12:00")


def test_one_minute_intersection_overlaps():
    assert overlaps("10:00", "12:00", "11:59", "13:59")


def test_engulfing_windows_overlap():
    assert overlaps("09:00", "13:00", "10:00", "12:00")
    assert overlaps("10:00", "12:00", "09:00", "13:00")
    assert overlaps("10:00", "12:00", "10:00", "12:00")


def test_unpadded_hours_compare_numerically():
    assert overlaps("9:00", "11:00", "10:00", "12:00")
    assert not overlaps("9:00", "10:00", "10:00", "12:00")


# --- validate_duration ---

def test_two_hour_window_is_valid():
    validate_duration("09:00", "11:00")
    validate_duration("9:30", "11:30")


@pytest.mark.parametrize("start,end", [("09:00", "10:30"), ("09:00", "11:01"), ("09:00", "09:00")])
def test_other_durations_are_rejected(start, end):
    with pytest.raises(InvalidDuration) as exc:
        validate_duration(start, end)
    assert exc.value.error_details == {"field": "duration", "message": "Class duration must be exactly 2 hours"}


@pytest.mark.parametrize("start,end", [("23:00", "01:00"), ("22:00", "00:00")])
def test_windows_crossing_midnight_are_rejected(start, end):
    with pytest.raises(InvalidDuration):
        validate_duration(start, end)


# --- check_schedule_admissible ---

def _full_day():
    return [
        _schedule(1, "06:00", "08:00"),
        _schedule(2, "08:00", "10:00"),
        _schedule(3, "10:00", "12:00"),
        _schedule(4, "12:00", "14:00"),
        _schedule(5, "14:00", "16:00"),
    ]


def test_sixth_schedule_of_the_day_is_rejected_even_without_overlap():
    with pytest.raises(DailyLimitExceeded):
        check_schedule_admissible("18:00", "20:00", _full_day())


def test_daily_limit_is_checked_before_overlap():
    with pytest.raises(DailyLimitExceeded):
        check_schedule_admissible("10:00", "12:00", _full_day())


def test_updated_schedule_does_not_count_against_itself():
    # Mover el horario 5 a otra franja libre del mismo día
    check_schedule_admissible("16:00", "18:00", _full_day(), exclude_id=5)
    # Mantener su propia franja tampoco es un solape
    check_schedule_admissible("14:00", "16:00", _full_day(), exclude_id=5)


def test_overlapping_candidate_is_rejected():
    existing = [_schedule(1, "10:00", "12:00")]
    with pytest.raises(TimeConflict):
        check_schedule_admissible("11:59", "13:59", existing)


def test_touching_candidate_is_accepted():
    existing = [_schedule(1, "10:00", "12:00")]
    check_schedule_admissible("12:00", "14:00", existing)
    check_schedule_admissible("08:00", "10:00", existing)


def test_update_still_conflicts_with_other_schedules():
    existing = [_schedule(1, "10:00", "12:00"), _schedule(2, "14:00", "16:00")]
    with pytest.raises(TimeConflict):
        check_schedule_admissible("11:00", "13:00", existing, exclude_id=2)


# --- check_booking_admissible ---

def test_tenth_booking_is_accepted_and_eleventh_is_full():
    schedule = _schedule(1, "09:00", "11:00")
    check_booking_admissible(1, schedule, _bookings(9), [], DAY_BEFORE, TZ)
    with pytest.raises(ScheduleFull):
        check_booking_admissible(1, schedule, _bookings(10), [], DAY_BEFORE, TZ)


def test_duplicate_booking_is_rejected():
    schedule = _schedule(1, "09:00", "11:00")
    bookings = [SimpleNamespace(trainee_id=1)]
    with pytest.raises(DuplicateBooking):
        check_booking_admissible(1, schedule, bookings, [schedule], DAY_BEFORE, TZ)


def test_full_is_reported_before_duplicate():
    schedule = _schedule(1, "09:00", "11:00")
    bookings = _bookings(9) + [SimpleNamespace(trainee_id=1)]
    with pytest.raises(ScheduleFull):
        check_booking_admissible(1, schedule, bookings, [schedule], DAY_BEFORE, TZ)


def test_trainee_overlap_on_same_day_is_rejected():
    booked = _schedule(2, "09:00", "11:00")
    candidate = _schedule(3, "10:00", "12:00")
    with pytest.raises(TraineeTimeConflict):
        check_booking_admissible(1, candidate, [], [booked], DAY_BEFORE, TZ)


def test_trainee_back_to_back_booking_is_accepted():
    booked = _schedule(2, "09:00", "11:00")
    candidate = _schedule(3, "11:00", "13:00")
    check_booking_admissible(1, candidate, [], [booked], DAY_BEFORE, TZ)


def test_trainee_bookings_on_other_dates_are_ignored():
    booked = _schedule(2, "09:00", "11:00", day=CLASS_DAY + timedelta(days=1))
    candidate = _schedule(3, "09:00", "11:00")
    check_booking_admissible(1, candidate, [], [booked], DAY_BEFORE, TZ)


def test_past_schedule_wins_over_every_other_check():
    schedule = _schedule(1, "09:00", "11:00")
    bookings = _bookings(9) + [SimpleNamespace(trainee_id=1)]
    booked = _schedule(2, "09:00", "11:00")
    with pytest.raises(PastSchedule) as exc:
        check_booking_admissible(1, schedule, bookings, [booked], _at(CLASS_DAY, 9, 1), TZ)
    assert exc.value.message == "Cannot book past schedules"


def test_start_is_interpreted_in_gym_timezone():
    schedule = _schedule(1, "09:00", "11:00")
    # 09:00 en Madrid (UTC+1 en marzo) son las 08:00 UTC
    now = _at(CLASS_DAY, 8, 30)
    check_booking_admissible(1, schedule, [], [], now, "UTC")
    with pytest.raises(PastSchedule):
        check_booking_admissible(1, schedule, [], [], now, "Europe/Madrid")


# --- check_cancel_admissible ---

def test_cancel_before_start_is_allowed():
    check_cancel_admissible(_schedule(1, "09:00", "11:00"), DAY_BEFORE, TZ)


def test_cancel_after_start_is_rejected():
    with pytest.raises(PastSchedule) as exc:
        check_cancel_admissible(_schedule(1, "09:00", "11:00"), _at(CLASS_DAY, 10), TZ)
    assert exc.value.message == "Cannot cancel past bookings"


# --- availability / schedule_state ---

def test_availability():
    assert availability(10, 9) == scheduling_rules.Availability(available_slots=1, is_available=True)
    assert availability(10, 10) == scheduling_rules.Availability(available_slots=0, is_available=False)


def test_schedule_state_transitions():
    starts_at = _at(CLASS_DAY, 9)
    assert schedule_state(starts_at, 3, 10, DAY_BEFORE) == ScheduleState.OPEN
    assert schedule_state(starts_at, 10, 10, DAY_BEFORE) == ScheduleState.FULL
    assert schedule_state(starts_at, 3, 10, starts_at) == ScheduleState.PAST
    assert schedule_state(starts_at, 10, 10, _at(CLASS_DAY, 12)) == ScheduleState.PAST
