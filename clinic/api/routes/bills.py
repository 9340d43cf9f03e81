import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_session, unwrap
from clinic.models.bill import BillPublic, PaymentStatus
from clinic.services.billing_service import (
    bill_to_public,
    get_bill,
    get_bill_for_appointment,
    list_bills,
    record_payment,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bills", tags=["bills"])


@router.get("", response_model=list[BillPublic])
async def list_all(
    patient_id: int | None = Query(None),
    status_param: PaymentStatus | None = Query(None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> list[BillPublic]:
    bills = await list_bills(session, patient_id=patient_id, status=status_param)
    logger.info("Found %d bill(s) for patient=%s status=%s", len(bills), patient_id, status_param)
    return [await bill_to_public(session, b) for b in bills]


@router.get("/appointment/{appointment_id}", response_model=BillPublic)
async def get_for_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> BillPublic:
    bill = await get_bill_for_appointment(session, appointment_id)
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Bill not found for appointment ID: {appointment_id}",
        )
    return await bill_to_public(session, bill)


@router.get("/{bill_id}", response_model=BillPublic)
async def get_one(
    bill_id: int,
    session: AsyncSession = Depends(get_session),
) -> BillPublic:
    bill = await get_bill(session, bill_id)
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Bill not found with ID: {bill_id}",
        )
    return await bill_to_public(session, bill)


@router.put("/{bill_id}/pay", response_model=BillPublic)
async def pay(
    bill_id: int,
    session: AsyncSession = Depends(get_session),
) -> BillPublic:
    logger.info("Recording payment for bill %s", bill_id)
    bill = unwrap(await record_payment(session, bill_id))
    return await bill_to_public(session, bill)
