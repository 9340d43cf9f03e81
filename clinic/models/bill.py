from datetime import date
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, SQLModel


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class Bill(SQLModel, table=True):
    __tablename__ = "bills"
    id: int | None = Field(default=None, primary_key=True)
    appointment_id: int = Field(foreign_key="appointments.id", unique=True, index=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    status: PaymentStatus = PaymentStatus.PENDING
    bill_date: date = Field(default_factory=date.today)


class BillPublic(SQLModel):
    id: int
    patient_id: int
    patient_name: str | None = None
    appointment_id: int
    amount: Decimal
    status: PaymentStatus
    bill_date: date
