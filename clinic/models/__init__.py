from clinic.models.doctor import (
    AvailabilityWindowCreate,
    AvailabilityWindowPublic,
    Doctor,
    DoctorAvailability,
    DoctorScheduleUpdate,
    WeekDay,
)
from clinic.models.patient import Patient
from clinic.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentReschedule,
    AppointmentStatus,
)
from clinic.models.bill import Bill, BillPublic, PaymentStatus

__all__ = [
    "AvailabilityWindowCreate",
    "AvailabilityWindowPublic",
    "Doctor",
    "DoctorAvailability",
    "DoctorScheduleUpdate",
    "WeekDay",
    "Patient",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentReschedule",
    "AppointmentStatus",
    "Bill",
    "BillPublic",
    "PaymentStatus",
]
