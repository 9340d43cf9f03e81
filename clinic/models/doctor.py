from datetime import date, time
from decimal import Decimal
from enum import Enum

from sqlmodel import Field, SQLModel


class WeekDay(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, d: date) -> "WeekDay":
        return list(cls)[d.weekday()]


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)
    full_name: str
    specialization: str | None = None
    consultation_fee: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        sa_column_kwargs={"server_default": "0.00"},
    )


class DoctorAvailability(SQLModel, table=True):
    """Recurring weekly open hours of a doctor for one weekday."""

    __tablename__ = "doctor_availabilities"
    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", ondelete="CASCADE", index=True)
    day_of_week: WeekDay
    start_time: time
    end_time: time


class AvailabilityWindowCreate(SQLModel):
    day_of_week: WeekDay
    start_time: time
    end_time: time


class AvailabilityWindowPublic(SQLModel):
    day_of_week: WeekDay
    start_time: time
    end_time: time


class DoctorScheduleUpdate(SQLModel):
    # None keeps the current fee; availabilities are required and replace the whole schedule
    consultation_fee: Decimal | None = Field(default=None, ge=0)
    availabilities: list[AvailabilityWindowCreate]
