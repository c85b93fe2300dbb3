from dataclasses import dataclass
from typing import Optional
import enum

from ..core.errors import InvalidTransition

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PATIENT_CANCELLED = "patient-cancelled"
    EMERGENCY_CANCELLED = "emergency-cancelled"
    
    @property
    def occupies_slot(self) -> bool:
        return self in (AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED)
    
    @property
    def is_cancellation(self) -> bool:
        return self in CANCELLATION_STATUSES

CANCELLATION_STATUSES = frozenset({
    AppointmentStatus.CANCELLED,
    AppointmentStatus.PATIENT_CANCELLED,
    AppointmentStatus.EMERGENCY_CANCELLED,
})

@dataclass
class Appointment:
    appt_id: str
    doctor_id: str
    patient_id: str
    # "YYYY-MM-DD HH:MM"; compared as an opaque string
    date_time: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    is_emergency: bool = False
    # Free-text reason recorded with a cancellation, not persisted
    note: Optional[str] = None
    
    @property
    def date(self) -> str:
        return self.date_time[:10]
    
    def occupies(self, doctor_id: str, date_time: str) -> bool:
        return (
            self.doctor_id == doctor_id
            and self.date_time == date_time
            and self.status.occupies_slot
        )
    
    def transition(self, new_status: AppointmentStatus, note: Optional[str] = None) -> None:
        """Move a scheduled appointment into one of its terminal statuses."""
        if self.status != AppointmentStatus.SCHEDULED:
            raise InvalidTransition(
                f"Appointment {self.appt_id} is already {self.status.value}"
            )
        if new_status == AppointmentStatus.SCHEDULED:
            raise InvalidTransition(f"Appointment {self.appt_id} is already scheduled")
        self.status = new_status
        self.note = note
    
    def __repr__(self):
        return (
            f"<Appointment(id='{self.appt_id}', doctor_id='{self.doctor_id}', "
            f"patient_id='{self.patient_id}', date='{self.date_time}', status='{self.status.value}')>"
        )
