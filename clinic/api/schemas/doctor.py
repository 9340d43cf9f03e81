from pydantic import BaseModel


class AvailableSlotsResponse(BaseModel):
    doctor_id: int
    date: str  # YYYY-MM-DD
    slots: list[str]  # "HH:mm-HH:mm", chronological
