"""
Role-scoped sessions.

A ``Session`` wraps an authenticated ``Identity`` and exposes only the
operations granted to its role in ``ROLE_PERMISSIONS``; anything else raises
``NotPermitted``. The dispatcher holds explicit references to the services
and hands them to each session it opens.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from ..core.database import FlatFileDatabase, check_fields
from ..core.errors import DoctorNotFound, NotFound, NotPermitted
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from .appointment_service import AppointmentService
from .audit_service import AuditLog
from .auth_service import AuthService, Identity
from .directory import Directory

class Operation(str, Enum):
    VIEW_APPOINTMENTS = "viewAppointments"
    UPDATE_AVAILABILITY = "updateAvailability"
    MARK_EMERGENCY_DUTY = "markEmergencyDuty"
    VIEW_PATIENT_HISTORY = "viewPatientHistory"
    COMPLETE_APPOINTMENT = "completeAppointment"
    BOOK = "book"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    VIEW_RECORDS = "viewRecords"
    REQUEST_EMERGENCY = "requestEmergency"
    ADD_DOCTOR = "addDoctor"
    ADD_PATIENT = "addPatient"
    GENERATE_REPORT = "generateReport"
    CANCEL_APPOINTMENT = "cancelAppointment"
    BACKUP = "backup"
    CHANGE_PASSWORD = "changePassword"

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Operation]] = {
    UserRole.DOCTOR: frozenset({
        Operation.VIEW_APPOINTMENTS,
        Operation.UPDATE_AVAILABILITY,
        Operation.MARK_EMERGENCY_DUTY,
        Operation.VIEW_PATIENT_HISTORY,
        Operation.COMPLETE_APPOINTMENT,
        Operation.CHANGE_PASSWORD,
    }),
    UserRole.PATIENT: frozenset({
        Operation.BOOK,
        Operation.CANCEL,
        Operation.RESCHEDULE,
        Operation.VIEW_RECORDS,
        Operation.REQUEST_EMERGENCY,
        Operation.CHANGE_PASSWORD,
    }),
    UserRole.ADMIN: frozenset({
        Operation.ADD_DOCTOR,
        Operation.ADD_PATIENT,
        Operation.GENERATE_REPORT,
        Operation.MARK_EMERGENCY_DUTY,
        Operation.CANCEL_APPOINTMENT,
        Operation.RESCHEDULE,
        Operation.BACKUP,
        Operation.CHANGE_PASSWORD,
    }),
}

@dataclass(frozen=True)
class PatientRecords:
    medical_history: str
    appointments: List[Appointment]

@dataclass(frozen=True)
class Report:
    doctors: int
    patients: int
    appointments: int
    scheduled: int
    completed: int
    cancelled: int
    emergency: int

class Session:
    def __init__(self, identity: Identity, dispatcher: "SessionDispatcher"):
        self.identity = identity
        self._dispatcher = dispatcher
    
    @property
    def role(self) -> UserRole:
        return self.identity.role
    
    @property
    def permitted_operations(self) -> FrozenSet[Operation]:
        return ROLE_PERMISSIONS[self.role]
    
    def can(self, operation: Operation) -> bool:
        return operation in self.permitted_operations
    
    def logout(self) -> None:
        self._dispatcher.audit.record("Logged out", self.identity.user_id)
    
    # Every role
    def change_password(self, current_password: str, new_password: str) -> None:
        self._require(Operation.CHANGE_PASSWORD)
        self._dispatcher.auth.change_password(self.identity, current_password, new_password)
    
    # Doctor
    def view_appointments(self) -> List[Appointment]:
        self._require(Operation.VIEW_APPOINTMENTS)
        return self._dispatcher.directory.appointments_for_doctor(self.identity.user_id)
    
    def update_availability(self, slot: str) -> List[str]:
        self._require(Operation.UPDATE_AVAILABILITY)
        check_fields(slot)
        directory = self._dispatcher.directory
        with directory.lock:
            doctor = self._doctor()
            doctor.available_slots.append(slot)
            self._dispatcher.audit.record("Updated availability", self.identity.user_id)
            return list(doctor.available_slots)
    
    def view_patient_history(self, patient_id: str) -> str:
        self._require(Operation.VIEW_PATIENT_HISTORY)
        patient = self._dispatcher.directory.find_patient(patient_id)
        if patient is None:
            raise NotFound(f"Patient not found: {patient_id}")
        self._dispatcher.audit.record(f"Viewed patient history: {patient_id}", self.identity.user_id)
        return patient.medical_history
    
    def complete_appointment(self, appt_id: str) -> Appointment:
        self._require(Operation.COMPLETE_APPOINTMENT)
        return self._dispatcher.appointments.complete(appt_id, self.identity.user_id)
    
    def mark_emergency_duty(self, doctor_id: Optional[str] = None) -> int:
        """Doctors flip their own duty flag; admins name the doctor."""
        self._require(Operation.MARK_EMERGENCY_DUTY)
        if self.role == UserRole.DOCTOR:
            if doctor_id not in (None, self.identity.user_id):
                raise NotPermitted("Doctors may only mark their own emergency duty")
            doctor_id = self.identity.user_id
        elif doctor_id is None:
            raise DoctorNotFound("A doctor ID is required")
        return self._dispatcher.appointments.mark_emergency_duty(doctor_id, self.identity.user_id)
    
    # Patient
    def book(self, doctor_id: str, date_time: str) -> str:
        self._require(Operation.BOOK)
        check_fields(date_time)
        return self._dispatcher.appointments.book(self.identity.user_id, doctor_id, date_time)
    
    def cancel(self, appt_id: str) -> Appointment:
        self._require(Operation.CANCEL)
        return self._dispatcher.appointments.cancel(
            appt_id, self.identity.user_id, self.role, AppointmentStatus.PATIENT_CANCELLED
        )
    
    def reschedule(self, appt_id: str, new_date_time: str) -> Appointment:
        self._require(Operation.RESCHEDULE)
        check_fields(new_date_time)
        appointments = self._dispatcher.appointments
        with self._dispatcher.directory.lock:
            appointment = self._dispatcher.directory.find_appointment(appt_id)
            if appointment is None:
                raise NotFound(f"Appointment not found: {appt_id}")
            if self.role == UserRole.PATIENT and appointment.patient_id != self.identity.user_id:
                raise NotPermitted("Patients may only reschedule their own appointments")
            return appointments.reschedule(appt_id, new_date_time, self.identity.user_id)
    
    def view_records(self) -> PatientRecords:
        self._require(Operation.VIEW_RECORDS)
        directory = self._dispatcher.directory
        with directory.lock:
            patient = self._patient()
            records = PatientRecords(
                medical_history=patient.medical_history,
                appointments=directory.appointments_for_patient(patient),
            )
            self._dispatcher.audit.record("Viewed medical records", self.identity.user_id)
        return records
    
    def request_emergency(self) -> str:
        self._require(Operation.REQUEST_EMERGENCY)
        return self._dispatcher.appointments.request_emergency(self.identity.user_id)
    
    # Admin
    def add_doctor(self, user_id: str, name: str, password: str, specialization: str) -> Doctor:
        self._require(Operation.ADD_DOCTOR)
        check_fields(user_id, name, specialization)
        doctor = Doctor.create(user_id, name, password, specialization=specialization)
        with self._dispatcher.directory.lock:
            self._dispatcher.directory.add_doctor(doctor)
            self._dispatcher.audit.record(f"Added doctor: {user_id}", self.identity.user_id)
        return doctor
    
    def add_patient(self, user_id: str, name: str, password: str, medical_history: str = "") -> Patient:
        self._require(Operation.ADD_PATIENT)
        check_fields(user_id, name, medical_history)
        patient = Patient.create(user_id, name, password, medical_history=medical_history)
        with self._dispatcher.directory.lock:
            self._dispatcher.directory.add_patient(patient)
            self._dispatcher.audit.record(f"Added patient: {user_id}", self.identity.user_id)
        return patient
    
    def cancel_appointment(self, appt_id: str, note: Optional[str] = None) -> Appointment:
        self._require(Operation.CANCEL_APPOINTMENT)
        return self._dispatcher.appointments.cancel(
            appt_id, self.identity.user_id, self.role, AppointmentStatus.CANCELLED, note
        )
    
    def generate_report(self) -> Report:
        self._require(Operation.GENERATE_REPORT)
        directory = self._dispatcher.directory
        with directory.lock:
            counts = directory.count_by_status()
            report = Report(
                doctors=len(directory.doctors),
                patients=len(directory.patients),
                appointments=len(directory.appointments),
                scheduled=counts[AppointmentStatus.SCHEDULED],
                completed=counts[AppointmentStatus.COMPLETED],
                cancelled=sum(counts[s] for s in counts if s.is_cancellation),
                emergency=sum(1 for a in directory.appointments if a.is_emergency),
            )
            self._dispatcher.audit.record("Generated report", self.identity.user_id)
        return report
    
    def backup(self) -> Path:
        self._require(Operation.BACKUP)
        backup_dir = self._dispatcher.database.backup(self._dispatcher.appointments.clock())
        self._dispatcher.audit.record("Data backup created", self.identity.user_id)
        return backup_dir
    
    def _require(self, operation: Operation) -> None:
        if not self.can(operation):
            raise NotPermitted(
                f"Operation {operation.value} is not available to role {self.role.value}"
            )
    
    def _doctor(self) -> Doctor:
        return self._dispatcher.auth.resolve(self.identity.user_id, UserRole.DOCTOR)
    
    def _patient(self) -> Patient:
        return self._dispatcher.auth.resolve(self.identity.user_id, UserRole.PATIENT)

class SessionDispatcher:
    def __init__(
        self,
        directory: Directory,
        auth: AuthService,
        appointments: AppointmentService,
        audit: AuditLog,
        database: FlatFileDatabase
    ):
        self.directory = directory
        self.auth = auth
        self.appointments = appointments
        self.audit = audit
        self.database = database
    
    def login(self, user_id: str, password: str) -> Session:
        identity = self.auth.authenticate(user_id, password)
        self.audit.record("Logged in", identity.user_id)
        return self.open_session(identity)
    
    def open_session(self, identity: Identity) -> Session:
        """Open a session for an identity that was authenticated earlier."""
        return Session(identity, self)
