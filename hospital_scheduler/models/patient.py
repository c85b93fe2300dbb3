from dataclasses import dataclass, field
from typing import ClassVar, List

from ..core.security import UserRole
from .user import User

@dataclass(repr=False)
class Patient(User):
    medical_history: str = ""
    # Reverse lookup only, the appointment record is the source of truth
    appointment_ids: List[str] = field(default_factory=list)
    
    role: ClassVar[UserRole] = UserRole.PATIENT
    
    def link_appointment(self, appt_id: str) -> None:
        if appt_id not in self.appointment_ids:
            self.appointment_ids.append(appt_id)
