from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_session, unwrap
from clinic.api.schemas.doctor import AvailableSlotsResponse
from clinic.models.doctor import (
    AvailabilityWindowPublic,
    DoctorAvailability,
    DoctorScheduleUpdate,
    WeekDay,
)
from clinic.services.availability_service import (
    get_available_days,
    get_doctor_availability,
    update_doctor_schedule,
)
from clinic.services.slot_service import get_available_slots

router = APIRouter(prefix="/doctors", tags=["doctors"])


def _windows_to_public(windows: list[DoctorAvailability]) -> list[AvailabilityWindowPublic]:
    return [
        AvailabilityWindowPublic(day_of_week=w.day_of_week, start_time=w.start_time, end_time=w.end_time)
        for w in windows
    ]


@router.get("/{doctor_id}/slots", response_model=AvailableSlotsResponse)
async def available_slots(
    doctor_id: int,
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Free 30-minute slots of the doctor on the given date, earliest first."""
    slots = unwrap(await get_available_slots(session, doctor_id, date_param))
    return AvailableSlotsResponse(doctor_id=doctor_id, date=date_param.isoformat(), slots=slots)


@router.get("/{doctor_id}/availability", response_model=list[AvailabilityWindowPublic])
async def availability(
    doctor_id: int,
    session: AsyncSession = Depends(get_session),
) -> list[AvailabilityWindowPublic]:
    return _windows_to_public(unwrap(await get_doctor_availability(session, doctor_id)))


@router.get("/{doctor_id}/available-days", response_model=list[WeekDay])
async def available_days(
    doctor_id: int,
    session: AsyncSession = Depends(get_session),
) -> list[WeekDay]:
    return unwrap(await get_available_days(session, doctor_id))


@router.put("/{doctor_id}/schedule", response_model=list[AvailabilityWindowPublic])
async def replace_schedule(
    doctor_id: int,
    body: DoctorScheduleUpdate,
    session: AsyncSession = Depends(get_session),
) -> list[AvailabilityWindowPublic]:
    """Replace the whole weekly schedule (and optionally the consultation fee)."""
    return _windows_to_public(unwrap(await update_doctor_schedule(session, doctor_id, body)))
