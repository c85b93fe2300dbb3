"""
Directory of doctors, patients, admins and appointments.

The Directory is the only owner of the entity collections. Other services
receive records through lookups and must go through the methods below to
insert anything. ``lock`` serializes every mutating operation in the system.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import threading

from ..core.errors import DuplicateID
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import Admin, User

logger = logging.getLogger(__name__)

class Directory:
    def __init__(self):
        self.lock = threading.RLock()
        self._doctors: List[Doctor] = []
        self._patients: List[Patient] = []
        self._admins: List[Admin] = []
        self._appointments: List[Appointment] = []
    
    # Read-only views
    @property
    def doctors(self) -> Tuple[Doctor, ...]:
        return tuple(self._doctors)
    
    @property
    def patients(self) -> Tuple[Patient, ...]:
        return tuple(self._patients)
    
    @property
    def admins(self) -> Tuple[Admin, ...]:
        return tuple(self._admins)
    
    @property
    def appointments(self) -> Tuple[Appointment, ...]:
        return tuple(self._appointments)
    
    # Lookups
    def find_doctor(self, doctor_id: str) -> Optional[Doctor]:
        return _first(self._doctors, doctor_id)
    
    def find_patient(self, patient_id: str) -> Optional[Patient]:
        return _first(self._patients, patient_id)
    
    def find_admin(self, admin_id: str) -> Optional[Admin]:
        return _first(self._admins, admin_id)
    
    def find_user(self, user_id: str) -> Optional[User]:
        """Doctors first, then patients, then admins."""
        return (
            self.find_doctor(user_id)
            or self.find_patient(user_id)
            or self.find_admin(user_id)
        )
    
    def find_appointment(self, appt_id: str) -> Optional[Appointment]:
        for appointment in self._appointments:
            if appointment.appt_id == appt_id:
                return appointment
        return None
    
    def appointments_for_doctor(self, doctor_id: str) -> List[Appointment]:
        return [a for a in self._appointments if a.doctor_id == doctor_id]
    
    def appointments_for_patient(self, patient: Patient) -> List[Appointment]:
        appointments = []
        for appt_id in patient.appointment_ids:
            appointment = self.find_appointment(appt_id)
            if appointment is not None:
                appointments.append(appointment)
        return appointments
    
    def is_slot_available(self, doctor_id: str, date_time: str) -> bool:
        """True iff no scheduled or completed appointment holds this exact slot."""
        with self.lock:
            return not any(
                appointment.occupies(doctor_id, date_time)
                for appointment in self._appointments
            )
    
    # Inserts
    def add_doctor(self, doctor: Doctor) -> Doctor:
        with self.lock:
            self._check_user_id(doctor.user_id)
            self._doctors.append(doctor)
        return doctor
    
    def add_patient(self, patient: Patient) -> Patient:
        with self.lock:
            self._check_user_id(patient.user_id)
            self._patients.append(patient)
        return patient
    
    def add_admin(self, admin: Admin) -> Admin:
        # Seeded on every startup, so only other admins can clash
        with self.lock:
            if self.find_admin(admin.user_id) is not None:
                raise DuplicateID(f"Admin ID already exists: {admin.user_id}")
            self._admins.append(admin)
        return admin
    
    def add_appointment(self, appointment: Appointment) -> Appointment:
        with self.lock:
            if self.find_appointment(appointment.appt_id) is not None:
                raise DuplicateID(f"Appointment ID already exists: {appointment.appt_id}")
            self._appointments.append(appointment)
            patient = self.find_patient(appointment.patient_id)
            if patient is not None:
                patient.link_appointment(appointment.appt_id)
        return appointment
    
    def restore(
        self,
        doctors: Iterable[Doctor],
        patients: Iterable[Patient],
        appointments: Iterable[Appointment]
    ) -> None:
        """Replace doctors, patients and appointments with a loaded snapshot.
        
        Records repeating an ID already seen in the same collection are
        dropped with a warning; admins are left untouched.
        """
        with self.lock:
            self._doctors = _unique(doctors, "doctor")
            self._patients = _unique(patients, "patient")
            self._appointments = []
            for appointment in appointments:
                if self.find_appointment(appointment.appt_id) is not None:
                    logger.warning(f"Skipping duplicate appointment ID {appointment.appt_id}")
                    continue
                self._appointments.append(appointment)
            
            for patient in self._patients:
                patient.appointment_ids = []
            for appointment in self._appointments:
                patient = self.find_patient(appointment.patient_id)
                if patient is not None:
                    patient.link_appointment(appointment.appt_id)
    
    def count_by_status(self) -> dict:
        counts = {status: 0 for status in AppointmentStatus}
        for appointment in self._appointments:
            counts[appointment.status] += 1
        return counts
    
    def _check_user_id(self, user_id: str) -> None:
        if self.find_user(user_id) is not None:
            raise DuplicateID(f"User ID already exists: {user_id}")

def _first(users: Sequence[User], user_id: str):
    for user in users:
        if user.user_id == user_id:
            return user
    return None

def _unique(users: Iterable[User], label: str) -> list:
    kept, seen = [], set()
    for user in users:
        if user.user_id in seen:
            logger.warning(f"Skipping duplicate {label} ID {user.user_id}")
            continue
        seen.add(user.user_id)
        kept.append(user)
    return kept
