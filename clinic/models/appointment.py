from datetime import date
from enum import Enum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel


class AppointmentStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# At most one live (non-cancelled) appointment per doctor, date and slot
_LIVE_SLOT_WHERE = text("status <> 'CANCELLED'")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_live_slot",
            "doctor_id",
            "appointment_date",
            "time_slot",
            unique=True,
            postgresql_where=_LIVE_SLOT_WHERE,
            sqlite_where=_LIVE_SLOT_WHERE,
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    appointment_date: date = Field(index=True)
    time_slot: str = Field(max_length=11)  # "HH:mm-HH:mm"
    reason: str | None = None
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    remarks: str | None = None


class AppointmentCreate(SQLModel):
    patient_id: int
    doctor_id: int
    appointment_date: date
    time_slot: str
    reason: str | None = None


class AppointmentReschedule(SQLModel):
    doctor_id: int
    appointment_date: date
    time_slot: str
    reason: str | None = None


class AppointmentPublic(SQLModel):
    id: int
    patient_id: int
    patient_name: str | None = None
    doctor_id: int
    doctor_name: str | None = None
    specialization: str | None = None
    appointment_date: date
    time_slot: str
    reason: str | None = None
    status: AppointmentStatus
    remarks: str | None = None
