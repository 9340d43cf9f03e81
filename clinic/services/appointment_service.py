import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ErrorKind, ServiceError, conflict, illegal_state, not_found
from clinic.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentReschedule,
    AppointmentStatus,
)
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient
from clinic.services.availability_service import get_doctor
from clinic.services.billing_service import (
    cancel_bill_for_appointment,
    create_initial_bill,
    update_bill_for_doctor_change,
)
from clinic.services.booking_validator import validate_booking

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


def _local_now() -> datetime:
    """Clinic wall-clock time; schedules carry no timezone."""
    return datetime.now()


async def get_patient(session: AsyncSession, patient_id: int) -> Patient | None:
    result = await session.execute(select(Patient).where(Patient.id == patient_id))
    return result.scalar_one_or_none()


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    result = await session.execute(select(Appointment).where(Appointment.id == appointment_id))
    return result.scalar_one_or_none()


async def list_appointments(
    session: AsyncSession, patient_id: int | None = None, doctor_id: int | None = None
) -> list[Appointment]:
    q = select(Appointment).order_by(Appointment.appointment_date, Appointment.time_slot, Appointment.id)
    if patient_id is not None:
        q = q.where(Appointment.patient_id == patient_id)
    if doctor_id is not None:
        q = q.where(Appointment.doctor_id == doctor_id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def appointment_to_public(session: AsyncSession, a: Appointment) -> AppointmentPublic:
    patient = await session.get(Patient, a.patient_id)
    doctor = await session.get(Doctor, a.doctor_id)
    return AppointmentPublic(
        id=a.id,
        patient_id=a.patient_id,
        patient_name=patient.full_name if patient else None,
        doctor_id=a.doctor_id,
        doctor_name=doctor.full_name if doctor else None,
        specialization=doctor.specialization if doctor else None,
        appointment_date=a.appointment_date,
        time_slot=a.time_slot,
        reason=a.reason,
        status=a.status,
        remarks=a.remarks,
    )


async def _flush_or_conflict(session: AsyncSession, doctor_id: int, d: date, time_slot: str) -> ServiceError | None:
    """Flush the pending appointment write. The live-slot unique index catches a booking
    that raced past the conflict check; the transaction is rolled back in that case."""
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        logger.warning("Slot %s on %s for doctor %s was taken by a concurrent booking", time_slot, d, doctor_id)
        return conflict(f"The requested time slot {time_slot} is already booked for doctor {doctor_id} on {d}.")
    return None


async def _cancel_bill(session: AsyncSession, appointment: Appointment) -> ServiceError | None:
    result = await cancel_bill_for_appointment(session, appointment)
    if isinstance(result, ServiceError):
        if result.kind is ErrorKind.NOT_FOUND:
            # Cancelling the appointment must not fail on a missing bill
            logger.warning("Billing record missing for cancelled appointment %s: %s", appointment.id, result.detail)
            return None
        return result
    return None


async def book_appointment(
    session: AsyncSession, data: AppointmentCreate, now: datetime | None = None
) -> Appointment | ServiceError:
    """Book a CONFIRMED appointment and open its PENDING bill in the same transaction."""
    patient = await get_patient(session, data.patient_id)
    if not patient:
        return not_found(f"Patient not found with ID: {data.patient_id}")
    doctor = await get_doctor(session, data.doctor_id, for_update=True)
    if not doctor:
        return not_found(f"Doctor not found with ID: {data.doctor_id}")

    error = await validate_booking(
        session, doctor.id, data.appointment_date, data.time_slot, now or _local_now()
    )
    if error:
        return error

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        appointment_date=data.appointment_date,
        time_slot=data.time_slot,
        reason=data.reason,
        status=AppointmentStatus.CONFIRMED,
    )
    session.add(appointment)
    error = await _flush_or_conflict(session, doctor.id, data.appointment_date, data.time_slot)
    if error:
        return error
    await session.refresh(appointment)

    bill = await create_initial_bill(session, appointment, doctor)
    if isinstance(bill, ServiceError):
        return bill
    logger.info(
        "Booked appointment %s: patient %s with doctor %s on %s %s",
        appointment.id, patient.id, doctor.id, appointment.appointment_date, appointment.time_slot,
    )
    return appointment


async def reschedule_appointment(
    session: AsyncSession, appointment_id: int, data: AppointmentReschedule, now: datetime | None = None
) -> Appointment | ServiceError:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return not_found(f"Appointment not found with ID: {appointment_id}")
    if appointment.status in TERMINAL_STATUSES:
        return illegal_state(f"Appointment cannot be rescheduled in {appointment.status.value} status.")

    new_doctor = await get_doctor(session, data.doctor_id, for_update=True)
    if not new_doctor:
        return not_found(f"New doctor not found with ID: {data.doctor_id}")

    # The appointment already holds its own slot, so an unchanged move must skip the conflict check
    unchanged = (
        appointment.doctor_id == new_doctor.id
        and appointment.appointment_date == data.appointment_date
        and appointment.time_slot == data.time_slot
    )
    error = await validate_booking(
        session,
        new_doctor.id,
        data.appointment_date,
        data.time_slot,
        now or _local_now(),
        check_conflict=not unchanged,
    )
    if error:
        return error

    doctor_changed = appointment.doctor_id != new_doctor.id
    appointment.doctor_id = new_doctor.id
    appointment.appointment_date = data.appointment_date
    appointment.time_slot = data.time_slot
    appointment.reason = data.reason
    appointment.status = AppointmentStatus.CONFIRMED
    session.add(appointment)
    error = await _flush_or_conflict(session, new_doctor.id, data.appointment_date, data.time_slot)
    if error:
        return error

    if doctor_changed:
        bill = await update_bill_for_doctor_change(session, appointment, new_doctor)
        if isinstance(bill, ServiceError):
            return bill
    logger.info(
        "Rescheduled appointment %s to doctor %s on %s %s",
        appointment.id, new_doctor.id, appointment.appointment_date, appointment.time_slot,
    )
    return appointment


async def update_appointment_status(
    session: AsyncSession, appointment_id: int, new_status: AppointmentStatus, remarks: str | None = None
) -> Appointment | ServiceError:
    """Overwrite status and remarks. A COMPLETED or CANCELLED appointment may only be set
    to its current status again."""
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return not_found(f"Appointment not found with ID: {appointment_id}")
    current = appointment.status
    if current in TERMINAL_STATUSES and new_status != current:
        return illegal_state(
            f"Appointment in {current.value} status cannot be changed to {new_status.value}."
        )

    appointment.status = new_status
    appointment.remarks = remarks
    session.add(appointment)
    await session.flush()

    if new_status == AppointmentStatus.CANCELLED and current != AppointmentStatus.CANCELLED:
        error = await _cancel_bill(session, appointment)
        if error:
            return error
    logger.info("Appointment %s status %s -> %s", appointment_id, current.value, new_status.value)
    return appointment


async def cancel_appointment(session: AsyncSession, appointment_id: int) -> Appointment | ServiceError:
    """Cancel and cancel/refund the bill. Cancelling twice is a no-op."""
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return not_found(f"Appointment not found with ID: {appointment_id}")
    if appointment.status == AppointmentStatus.COMPLETED:
        return illegal_state("Completed appointments cannot be cancelled.")
    if appointment.status == AppointmentStatus.CANCELLED:
        return appointment

    appointment.status = AppointmentStatus.CANCELLED
    session.add(appointment)
    await session.flush()
    error = await _cancel_bill(session, appointment)
    if error:
        return error
    logger.info("Cancelled appointment %s", appointment_id)
    return appointment
