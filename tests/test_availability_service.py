from datetime import time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from clinic.core.errors import ErrorKind
from clinic.models import (
    AppointmentCreate,
    AvailabilityWindowCreate,
    Doctor,
    DoctorAvailability,
    DoctorScheduleUpdate,
    WeekDay,
)
from clinic.services.appointment_service import book_appointment
from clinic.services.availability_service import (
    get_availability_window,
    get_available_days,
    get_doctor_availability,
    update_doctor_schedule,
    validate_windows,
    window_for,
)
from clinic.services.billing_service import get_bill_for_appointment
from clinic.services.slot_service import get_available_slots
from conftest import MONDAY, NOW, TUESDAY, WEDNESDAY


def test_window_for_matches_weekday():
    monday = DoctorAvailability(doctor_id=1, day_of_week=WeekDay.MONDAY, start_time=time(9), end_time=time(12))
    friday = DoctorAvailability(doctor_id=1, day_of_week=WeekDay.FRIDAY, start_time=time(14), end_time=time(18))
    assert window_for([friday, monday], MONDAY) is monday
    assert window_for([friday, monday], TUESDAY) is None
    assert window_for([], MONDAY) is None


def test_weekday_of_date():
    assert WeekDay.of(MONDAY) is WeekDay.MONDAY
    assert WeekDay.of(WEDNESDAY) is WeekDay.WEDNESDAY


def test_validate_windows_rejects_repeated_day_and_inverted_hours():
    error = validate_windows(
        [
            AvailabilityWindowCreate(day_of_week=WeekDay.MONDAY, start_time=time(9), end_time=time(12)),
            AvailabilityWindowCreate(day_of_week=WeekDay.MONDAY, start_time=time(11), end_time=time(15)),
        ]
    )
    assert error.kind is ErrorKind.INVALID_INPUT
    assert "MONDAY is repeated" in error.detail

    error = validate_windows(
        [AvailabilityWindowCreate(day_of_week=WeekDay.FRIDAY, start_time=time(12), end_time=time(9))]
    )
    assert "must start before it ends" in error.detail


async def test_stored_window_lookup(session, doctor):
    window = await get_availability_window(session, doctor.id, TUESDAY)
    assert (window.start_time, window.end_time) == (time(10), time(11))
    assert await get_availability_window(session, doctor.id, WEDNESDAY) is None


async def test_availability_is_ordered_monday_first(session, doctor):
    windows = await get_doctor_availability(session, doctor.id)
    assert [w.day_of_week for w in windows] == [WeekDay.MONDAY, WeekDay.TUESDAY]
    assert await get_available_days(session, doctor.id) == [WeekDay.MONDAY, WeekDay.TUESDAY]
    assert (await get_available_days(session, 999)).kind is ErrorKind.NOT_FOUND


async def test_schedule_is_replaced_wholesale(session, doctor):
    result = await update_doctor_schedule(
        session,
        doctor.id,
        DoctorScheduleUpdate(
            availabilities=[
                AvailabilityWindowCreate(day_of_week=WeekDay.WEDNESDAY, start_time=time(14), end_time=time(15)),
            ]
        ),
    )
    await session.commit()

    assert [w.day_of_week for w in result] == [WeekDay.WEDNESDAY]
    assert await get_available_slots(session, doctor.id, MONDAY) == []
    assert await get_available_slots(session, doctor.id, WEDNESDAY) == ["14:00-14:30", "14:30-15:00"]


async def test_invalid_schedule_leaves_existing_windows(session, doctor):
    result = await update_doctor_schedule(
        session,
        doctor.id,
        DoctorScheduleUpdate(
            availabilities=[
                AvailabilityWindowCreate(day_of_week=WeekDay.MONDAY, start_time=time(9), end_time=time(10)),
                AvailabilityWindowCreate(day_of_week=WeekDay.MONDAY, start_time=time(9, 30), end_time=time(11)),
            ]
        ),
    )
    assert result.kind is ErrorKind.INVALID_INPUT
    assert len(await get_doctor_availability(session, doctor.id)) == 2


async def test_fee_change_does_not_reprice_existing_bills(session, patient, doctor):
    appointment = await book_appointment(
        session,
        AppointmentCreate(patient_id=patient.id, doctor_id=doctor.id, appointment_date=TUESDAY, time_slot="10:00-10:30"),
        now=NOW,
    )
    await session.commit()

    await update_doctor_schedule(
        session,
        doctor.id,
        DoctorScheduleUpdate(
            consultation_fee=Decimal("650.00"),
            availabilities=[
                AvailabilityWindowCreate(day_of_week=WeekDay.TUESDAY, start_time=time(10), end_time=time(11)),
            ],
        ),
    )
    await session.commit()

    assert doctor.consultation_fee == Decimal("650.00")
    assert (await get_bill_for_appointment(session, appointment.id)).amount == Decimal("500.00")


async def test_schedule_update_for_unknown_doctor(session):
    result = await update_doctor_schedule(session, 999, DoctorScheduleUpdate(availabilities=[]))
    assert result.kind is ErrorKind.NOT_FOUND


async def test_stored_lookup_prefers_earliest_window_for_a_day(session, doctor):
    session.add(
        DoctorAvailability(doctor_id=doctor.id, day_of_week=WeekDay.TUESDAY, start_time=time(15), end_time=time(16))
    )
    await session.commit()

    window = await get_availability_window(session, doctor.id, TUESDAY)
    assert (window.start_time, window.end_time) == (time(10), time(11))


def test_schedule_update_requires_availabilities():
    with pytest.raises(ValidationError):
        DoctorScheduleUpdate.model_validate({"consultation_fee": "600.00"})


def test_table_defaults_match_migration():
    fee = Doctor.__table__.c.consultation_fee
    assert fee.server_default.arg == "0.00"
    (fk,) = DoctorAvailability.__table__.c.doctor_id.foreign_keys
    assert fk.ondelete == "CASCADE"
