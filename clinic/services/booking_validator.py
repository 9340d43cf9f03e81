from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ServiceError, conflict, invalid_input
from clinic.models.doctor import DoctorAvailability, WeekDay
from clinic.services.availability_service import get_availability_window
from clinic.services.slot_service import (
    SLOT_DURATION_MINUTES,
    TIME_FORMAT,
    count_live_appointments,
    parse_time_slot,
    slot_minutes,
)


def validate_schedule(
    window: DoctorAvailability | None, d: date, time_slot: str, now: datetime
) -> ServiceError | None:
    """Check a requested slot against the doctor's window for that day and the clock.

    Checks run in order and the first failure wins: format, duration, the doctor
    working that weekday, containment in working hours, not in the past.
    """
    parsed = parse_time_slot(time_slot)
    if parsed is None:
        return invalid_input(f"Invalid time slot format: {time_slot}. Expected HH:mm-HH:mm.")
    start, end = parsed

    if slot_minutes(start, end) != SLOT_DURATION_MINUTES:
        return invalid_input(f"Requested slot duration must be {SLOT_DURATION_MINUTES} minutes.")

    if window is None:
        return invalid_input(f"Doctor is not available on {WeekDay.of(d).value}.")

    if start < window.start_time or end > window.end_time:
        return invalid_input(
            "Requested slot is outside the doctor's scheduled working hours "
            f"({window.start_time.strftime(TIME_FORMAT)} - {window.end_time.strftime(TIME_FORMAT)})."
        )

    requested = datetime.combine(d, start)
    if requested < now:
        return invalid_input(
            f"Cannot book an appointment in the past. Requested time: {requested:%Y-%m-%d %H:%M}"
        )
    return None


async def validate_booking(
    session: AsyncSession,
    doctor_id: int,
    d: date,
    time_slot: str,
    now: datetime,
    check_conflict: bool = True,
) -> ServiceError | None:
    """Schedule checks, then the conflict check last. Must run in the same transaction
    that writes the appointment."""
    window = await get_availability_window(session, doctor_id, d)
    error = validate_schedule(window, d, time_slot, now)
    if error:
        return error
    if check_conflict and await count_live_appointments(session, doctor_id, d, time_slot) > 0:
        return conflict(f"The requested time slot {time_slot} is already booked for doctor {doctor_id} on {d}.")
    return None
