import logging
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ServiceError, invalid_input, not_found
from clinic.models.doctor import (
    AvailabilityWindowCreate,
    Doctor,
    DoctorAvailability,
    DoctorScheduleUpdate,
    WeekDay,
)

logger = logging.getLogger(__name__)

_WEEK_ORDER = {day: i for i, day in enumerate(WeekDay)}


async def get_doctor(session: AsyncSession, doctor_id: int, for_update: bool = False) -> Doctor | None:
    """Load a doctor. With for_update, the row stays locked until the transaction ends,
    which serializes bookings against the same doctor (no-op on SQLite)."""
    q = select(Doctor).where(Doctor.id == doctor_id)
    if for_update:
        q = q.with_for_update()
    result = await session.execute(q)
    return result.scalar_one_or_none()


def window_for(windows: Iterable[DoctorAvailability], d: date) -> DoctorAvailability | None:
    """First window in iteration order whose weekday matches d, or None when closed."""
    day = WeekDay.of(d)
    for window in windows:
        if window.day_of_week == day:
            return window
    return None


async def get_availability_window(
    session: AsyncSession, doctor_id: int, d: date
) -> DoctorAvailability | None:
    result = await session.execute(
        select(DoctorAvailability)
        .where(DoctorAvailability.doctor_id == doctor_id)
        .order_by(DoctorAvailability.id)
    )
    return window_for(result.scalars().all(), d)


def _sorted_windows(windows: Iterable[DoctorAvailability]) -> list[DoctorAvailability]:
    return sorted(windows, key=lambda w: (_WEEK_ORDER[WeekDay(w.day_of_week)], w.start_time))


async def _windows_of(session: AsyncSession, doctor_id: int) -> list[DoctorAvailability]:
    result = await session.execute(
        select(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id)
    )
    return _sorted_windows(result.scalars().all())


async def get_doctor_availability(
    session: AsyncSession, doctor_id: int
) -> list[DoctorAvailability] | ServiceError:
    """Weekly schedule of a doctor, Monday first."""
    if not await get_doctor(session, doctor_id):
        return not_found(f"Doctor not found with ID: {doctor_id}")
    return await _windows_of(session, doctor_id)


async def get_available_days(session: AsyncSession, doctor_id: int) -> list[WeekDay] | ServiceError:
    windows = await get_doctor_availability(session, doctor_id)
    if isinstance(windows, ServiceError):
        return windows
    days: list[WeekDay] = []
    for window in windows:
        day = WeekDay(window.day_of_week)
        if day not in days:
            days.append(day)
    return days


def validate_windows(windows: Sequence[AvailabilityWindowCreate]) -> ServiceError | None:
    """One window per weekday, each with start before end. Two windows on the same
    day are rejected outright rather than merged."""
    seen: set[WeekDay] = set()
    for window in windows:
        if window.start_time >= window.end_time:
            return invalid_input(
                f"Availability on {window.day_of_week.value} must start before it ends "
                f"({window.start_time:%H:%M} - {window.end_time:%H:%M})."
            )
        if window.day_of_week in seen:
            return invalid_input(f"Only one availability window is allowed per day; {window.day_of_week.value} is repeated.")
        seen.add(window.day_of_week)
    return None


async def update_doctor_schedule(
    session: AsyncSession, doctor_id: int, data: DoctorScheduleUpdate
) -> list[DoctorAvailability] | ServiceError:
    """Replace the doctor's availability wholesale (delete all, insert new) and optionally
    set a new consultation fee. Existing bills keep the fee they were created with."""
    doctor = await get_doctor(session, doctor_id, for_update=True)
    if not doctor:
        return not_found(f"Doctor not found with ID: {doctor_id}")
    error = validate_windows(data.availabilities)
    if error:
        return error

    if data.consultation_fee is not None:
        doctor.consultation_fee = data.consultation_fee
        session.add(doctor)

    await session.execute(delete(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id))
    new_windows = [
        DoctorAvailability(
            doctor_id=doctor_id,
            day_of_week=w.day_of_week,
            start_time=w.start_time,
            end_time=w.end_time,
        )
        for w in data.availabilities
    ]
    session.add_all(new_windows)
    await session.flush()
    logger.info("Replaced schedule of doctor %s with %d window(s)", doctor_id, len(new_windows))
    return _sorted_windows(new_windows)
