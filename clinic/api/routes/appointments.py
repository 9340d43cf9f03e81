import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_session, unwrap
from clinic.api.schemas.appointment import (
    BookAppointmentRequest,
    RescheduleAppointmentRequest,
    StatusUpdateRequest,
)
from clinic.models.appointment import AppointmentCreate, AppointmentPublic, AppointmentReschedule
from clinic.services.appointment_service import (
    appointment_to_public,
    book_appointment,
    cancel_appointment,
    get_appointment,
    list_appointments,
    reschedule_appointment,
    update_appointment_status,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book(
    body: BookAppointmentRequest,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    logger.info(
        "Booking appointment for patient %s with doctor %s on %s %s",
        body.patient_id, body.doctor_id, body.appointment_date, body.time_slot,
    )
    data = AppointmentCreate(**body.model_dump())
    appointment = unwrap(await book_appointment(session, data))
    return await appointment_to_public(session, appointment)


@router.get("", response_model=list[AppointmentPublic])
async def list_all(
    patient_id: int | None = Query(None),
    doctor_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_appointments(session, patient_id=patient_id, doctor_id=doctor_id)
    return [await appointment_to_public(session, a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_one(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Appointment not found with ID: {appointment_id}",
        )
    return await appointment_to_public(session, appointment)


@router.put("/{appointment_id}/reschedule", response_model=AppointmentPublic)
async def reschedule(
    appointment_id: int,
    body: RescheduleAppointmentRequest,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    logger.info(
        "Rescheduling appointment %s to %s %s for doctor %s",
        appointment_id, body.appointment_date, body.time_slot, body.doctor_id,
    )
    data = AppointmentReschedule(**body.model_dump())
    appointment = unwrap(await reschedule_appointment(session, appointment_id, data))
    return await appointment_to_public(session, appointment)


@router.put("/{appointment_id}/status", response_model=AppointmentPublic)
async def update_status(
    appointment_id: int,
    body: StatusUpdateRequest,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    logger.info("Updating appointment %s status to %s. Remarks: %s", appointment_id, body.status.value, body.remarks)
    appointment = unwrap(await update_appointment_status(session, appointment_id, body.status, body.remarks))
    return await appointment_to_public(session, appointment)


@router.put("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    logger.info("Cancelling appointment %s", appointment_id)
    appointment = unwrap(await cancel_appointment(session, appointment_id))
    return await appointment_to_public(session, appointment)
