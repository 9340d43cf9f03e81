from datetime import datetime, time

import pytest

from clinic.core.errors import ErrorKind
from clinic.models import Appointment, DoctorAvailability, WeekDay
from clinic.services.booking_validator import validate_booking, validate_schedule
from conftest import MONDAY, NOW, TUESDAY, WEDNESDAY

MONDAY_WINDOW = DoctorAvailability(doctor_id=1, day_of_week=WeekDay.MONDAY, start_time=time(9, 0), end_time=time(12, 0))


@pytest.mark.parametrize(
    "window, time_slot, fragment",
    [
        (MONDAY_WINDOW, "0900-0930", "Invalid time slot format"),
        (MONDAY_WINDOW, "09:00-10:00", "must be 30 minutes"),
        (MONDAY_WINDOW, "09:00-09:15", "must be 30 minutes"),
        (None, "09:00-09:30", "not available on MONDAY"),
        (MONDAY_WINDOW, "08:30-09:00", "outside the doctor's scheduled working hours (09:00 - 12:00)"),
        (MONDAY_WINDOW, "11:45-12:15", "outside the doctor's scheduled working hours"),
    ],
)
def test_schedule_errors_are_invalid_input(window, time_slot, fragment):
    error = validate_schedule(window, MONDAY, time_slot, NOW)
    assert error is not None
    assert error.kind is ErrorKind.INVALID_INPUT
    assert fragment in error.detail


def test_format_is_checked_before_availability():
    error = validate_schedule(None, MONDAY, "bad", NOW)
    assert "Invalid time slot format" in error.detail


def test_last_slot_of_the_window_is_valid():
    assert validate_schedule(MONDAY_WINDOW, MONDAY, "11:30-12:00", NOW) is None


def test_past_slot_today_is_rejected():
    now = datetime(2030, 1, 7, 10, 15)
    error = validate_schedule(MONDAY_WINDOW, MONDAY, "09:00-09:30", now)
    assert error.kind is ErrorKind.INVALID_INPUT
    assert "Cannot book an appointment in the past" in error.detail


def test_slot_starting_exactly_now_is_accepted():
    now = datetime(2030, 1, 7, 10, 0)
    assert validate_schedule(MONDAY_WINDOW, MONDAY, "10:00-10:30", now) is None


async def test_validate_booking_uses_the_weekday_window(session, doctor):
    assert await validate_booking(session, doctor.id, TUESDAY, "10:30-11:00", NOW) is None
    error = await validate_booking(session, doctor.id, TUESDAY, "11:00-11:30", NOW)
    assert error.kind is ErrorKind.INVALID_INPUT
    error = await validate_booking(session, doctor.id, WEDNESDAY, "10:00-10:30", NOW)
    assert "not available on WEDNESDAY" in error.detail


async def test_taken_slot_is_a_conflict_unless_skipped(session, doctor, patient):
    session.add(
        Appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_date=TUESDAY, time_slot="10:00-10:30")
    )
    await session.commit()

    error = await validate_booking(session, doctor.id, TUESDAY, "10:00-10:30", NOW)
    assert error.kind is ErrorKind.CONFLICT
    assert error.retryable
    assert await validate_booking(session, doctor.id, TUESDAY, "10:00-10:30", NOW, check_conflict=False) is None


async def test_schedule_errors_win_over_conflicts(session, doctor, patient):
    session.add(
        Appointment(patient_id=patient.id, doctor_id=doctor.id, appointment_date=TUESDAY, time_slot="10:00-10:30")
    )
    await session.commit()

    late = datetime(2030, 1, 8, 12, 0)
    error = await validate_booking(session, doctor.id, TUESDAY, "10:00-10:30", late)
    assert error.kind is ErrorKind.INVALID_INPUT
