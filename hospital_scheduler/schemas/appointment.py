from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from ..models.appointment import AppointmentStatus

SLOT_PATTERN = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$"

def _single_line(value: str) -> str:
    if "|" in value or "\n" in value or "\r" in value:
        raise ValueError("must not contain '|' or line breaks")
    return value

class AppointmentBook(BaseModel):
    doctor_id: str = Field(..., min_length=1)
    date_time: str = Field(..., pattern=SLOT_PATTERN, examples=["2025-04-05 10:00"])

class AppointmentReschedule(BaseModel):
    date_time: str = Field(..., pattern=SLOT_PATTERN)

class AppointmentCancel(BaseModel):
    note: Optional[str] = Field(None, max_length=255)
    
    @field_validator("note")
    @classmethod
    def single_line(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _single_line(value)

class AppointmentResponse(BaseModel):
    appt_id: str
    doctor_id: str
    patient_id: str
    date_time: str
    status: AppointmentStatus
    is_emergency: bool
    note: Optional[str] = None
    
    class Config:
        from_attributes = True

class BookingResponse(BaseModel):
    appt_id: str

class AvailabilityUpdate(BaseModel):
    slot: str = Field(..., pattern=SLOT_PATTERN)

class AvailabilityResponse(BaseModel):
    available_slots: List[str]

class EmergencyDutyResponse(BaseModel):
    doctor_id: str
    on_emergency_duty: bool = True
    cancelled_count: int

class PatientHistoryResponse(BaseModel):
    patient_id: str
    medical_history: str

class RecordsResponse(BaseModel):
    medical_history: str
    appointments: List[AppointmentResponse]

class DoctorCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1)
    specialization: str = Field(..., min_length=1, max_length=100)
    
    @field_validator("user_id", "name", "specialization")
    @classmethod
    def single_line(cls, value: str) -> str:
        return _single_line(value)

class PatientCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1)
    medical_history: str = ""
    
    @field_validator("user_id", "name", "medical_history")
    @classmethod
    def single_line(cls, value: str) -> str:
        return _single_line(value)

class DoctorResponse(BaseModel):
    user_id: str
    name: str
    specialization: str
    on_emergency_duty: bool
    
    class Config:
        from_attributes = True

class PatientResponse(BaseModel):
    user_id: str
    name: str
    medical_history: str
    
    class Config:
        from_attributes = True

class ReportResponse(BaseModel):
    doctors: int
    patients: int
    appointments: int
    scheduled: int
    completed: int
    cancelled: int
    emergency: int
    
    class Config:
        from_attributes = True

class BackupResponse(BaseModel):
    backup_dir: str
