from dataclasses import dataclass, field
from typing import ClassVar, List

from ..core.security import UserRole
from .user import User

@dataclass(repr=False)
class Doctor(User):
    specialization: str = ""
    # Slot strings such as "2025-04-05 10:00"; append-only
    available_slots: List[str] = field(default_factory=list)
    # One-way flip for the lifetime of a session
    on_emergency_duty: bool = False
    
    role: ClassVar[UserRole] = UserRole.DOCTOR
    
    def __repr__(self):
        return f"<Doctor(id='{self.user_id}', name='{self.name}', specialization='{self.specialization}')>"
