from datetime import date

from pydantic import BaseModel, Field

from clinic.models.appointment import AppointmentStatus


class BookAppointmentRequest(BaseModel):
    patient_id: int
    doctor_id: int
    appointment_date: date
    time_slot: str = Field(..., examples=["09:00-09:30"])
    reason: str | None = None


class RescheduleAppointmentRequest(BaseModel):
    doctor_id: int
    appointment_date: date
    time_slot: str = Field(..., examples=["10:30-11:00"])
    reason: str | None = None


class StatusUpdateRequest(BaseModel):
    status: AppointmentStatus
    remarks: str | None = None
