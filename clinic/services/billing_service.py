import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.errors import ServiceError, illegal_state, not_found
from clinic.models.appointment import Appointment
from clinic.models.bill import Bill, BillPublic, PaymentStatus
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient

logger = logging.getLogger(__name__)


async def get_bill(session: AsyncSession, bill_id: int) -> Bill | None:
    result = await session.execute(select(Bill).where(Bill.id == bill_id))
    return result.scalar_one_or_none()


async def get_bill_for_appointment(session: AsyncSession, appointment_id: int) -> Bill | None:
    result = await session.execute(select(Bill).where(Bill.appointment_id == appointment_id))
    return result.scalar_one_or_none()


async def list_bills(
    session: AsyncSession,
    patient_id: int | None = None,
    status: PaymentStatus | None = None,
) -> list[Bill]:
    q = select(Bill).order_by(Bill.bill_date.desc(), Bill.id.desc())
    if patient_id is not None:
        q = q.where(Bill.patient_id == patient_id)
    if status is not None:
        q = q.where(Bill.status == status)
    result = await session.execute(q)
    return list(result.scalars().all())


async def bill_to_public(session: AsyncSession, bill: Bill) -> BillPublic:
    patient = await session.get(Patient, bill.patient_id)
    return BillPublic(
        id=bill.id,
        patient_id=bill.patient_id,
        patient_name=patient.full_name if patient else None,
        appointment_id=bill.appointment_id,
        amount=bill.amount,
        status=bill.status,
        bill_date=bill.bill_date,
    )


async def create_initial_bill(
    session: AsyncSession, appointment: Appointment, doctor: Doctor, bill_date: date | None = None
) -> Bill | ServiceError:
    """Open the PENDING bill of a freshly booked appointment at the doctor's current fee."""
    if await get_bill_for_appointment(session, appointment.id):
        return illegal_state(f"Bill already exists for appointment ID: {appointment.id}")
    bill = Bill(
        appointment_id=appointment.id,
        patient_id=appointment.patient_id,
        amount=doctor.consultation_fee,
        status=PaymentStatus.PENDING,
        bill_date=bill_date or date.today(),
    )
    session.add(bill)
    await session.flush()
    await session.refresh(bill)
    logger.info("Created bill %s for appointment %s: %s", bill.id, appointment.id, bill.amount)
    return bill


async def record_payment(session: AsyncSession, bill_id: int) -> Bill | ServiceError:
    bill = await get_bill(session, bill_id)
    if not bill:
        return not_found(f"Bill not found with ID: {bill_id}")
    if bill.status == PaymentStatus.PAID:
        return bill
    if bill.status != PaymentStatus.PENDING:
        return illegal_state(f"Bill {bill_id} is {bill.status.value} and cannot be paid.")
    bill.status = PaymentStatus.PAID
    session.add(bill)
    await session.flush()
    logger.info("Recorded payment for bill %s", bill_id)
    return bill


async def update_bill_for_doctor_change(
    session: AsyncSession, appointment: Appointment, new_doctor: Doctor
) -> Bill | ServiceError:
    """Reprice the bill at the new doctor's current fee. Status is left as is."""
    bill = await get_bill_for_appointment(session, appointment.id)
    if not bill:
        return not_found(f"Bill not found for appointment: {appointment.id}")
    bill.amount = new_doctor.consultation_fee
    session.add(bill)
    await session.flush()
    logger.info("Repriced bill %s to %s after doctor change", bill.id, bill.amount)
    return bill


async def cancel_bill_for_appointment(session: AsyncSession, appointment: Appointment) -> Bill | ServiceError:
    """PAID becomes REFUNDED, PENDING becomes CANCELLED; a bill already CANCELLED or REFUNDED is left alone."""
    bill = await get_bill_for_appointment(session, appointment.id)
    if not bill:
        return not_found(f"Bill not found for appointment: {appointment.id}")
    previous = bill.status
    if bill.status == PaymentStatus.PAID:
        bill.status = PaymentStatus.REFUNDED
    elif bill.status == PaymentStatus.PENDING:
        bill.status = PaymentStatus.CANCELLED
    else:
        return bill
    session.add(bill)
    await session.flush()
    logger.info("Bill %s moved %s -> %s", bill.id, previous.value, bill.status.value)
    return bill
