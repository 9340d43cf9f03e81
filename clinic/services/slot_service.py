from datetime import date, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ServiceError, not_found
from clinic.models.appointment import Appointment, AppointmentStatus
from clinic.models.doctor import DoctorAvailability
from clinic.services.availability_service import get_availability_window, get_doctor

SLOT_DURATION_MINUTES = 30
TIME_FORMAT = "%H:%M"


def _parse_hhmm(value: str) -> time:
    # strptime alone would accept "9:5"
    if len(value) != 5:
        raise ValueError(value)
    return datetime.strptime(value, TIME_FORMAT).time()


def parse_time_slot(time_slot: str) -> tuple[time, time] | None:
    """Parse "HH:mm-HH:mm" into (start, end). Returns None when malformed."""
    parts = time_slot.split("-")
    if len(parts) != 2:
        return None
    try:
        return _parse_hhmm(parts[0]), _parse_hhmm(parts[1])
    except ValueError:
        return None


def format_time_slot(start: time, end: time) -> str:
    return f"{start.strftime(TIME_FORMAT)}-{end.strftime(TIME_FORMAT)}"


def slot_minutes(start: time, end: time) -> int:
    """Signed length in minutes of [start, end) on a single day."""
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return int(delta.total_seconds() // 60)


def generate_slots(window: DoctorAvailability) -> list[str]:
    """Split a window into consecutive fixed-length slots; the last slot may end exactly at end_time."""
    slots: list[str] = []
    delta = timedelta(minutes=SLOT_DURATION_MINUTES)
    current = datetime.combine(date.min, window.start_time)
    end = datetime.combine(date.min, window.end_time)
    while current + delta <= end:
        slots.append(format_time_slot(current.time(), (current + delta).time()))
        current += delta
    return slots


async def get_booked_time_slots(session: AsyncSession, doctor_id: int, d: date) -> set[str]:
    result = await session.execute(
        select(Appointment.time_slot).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == d,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
    )
    return {row[0] for row in result.all()}


async def count_live_appointments(
    session: AsyncSession, doctor_id: int, d: date, time_slot: str
) -> int:
    result = await session.execute(
        select(func.count(Appointment.id)).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == d,
            Appointment.time_slot == time_slot,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
    )
    return result.scalar_one()


async def get_available_slots(
    session: AsyncSession, doctor_id: int, d: date
) -> list[str] | ServiceError:
    """Free slots of a doctor on a date, in chronological order. Computed on every call."""
    if not await get_doctor(session, doctor_id):
        return not_found(f"Doctor not found with ID: {doctor_id}")
    window = await get_availability_window(session, doctor_id, d)
    if window is None:
        return []
    booked = await get_booked_time_slots(session, doctor_id, d)
    return [s for s in generate_slots(window) if s not in booked]
