"""
Appointment lifecycle: booking, rescheduling, cancellation and the
emergency-duty cascade.

Every operation holds the Directory lock for its whole duration, so checks
and the mutations they guard are never interleaved with another writer, and
audit entries are written in the same order as the mutations.
"""

from datetime import datetime
from typing import Callable, List, Optional
import logging
import uuid

from ..core.database import check_fields
from ..core.errors import (
    DoctorNotFound, NoDoctorAvailable, NotFound, NotPermitted, SlotUnavailable
)
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from .audit_service import AuditLog
from .directory import Directory

logger = logging.getLogger(__name__)

SLOT_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"

class AppointmentService:
    def __init__(
        self,
        directory: Directory,
        audit: AuditLog,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.directory = directory
        self.audit = audit
        self.clock = clock
    
    def book(self, patient_id: str, doctor_id: str, date_time: str) -> str:
        """Book a regular appointment and return its ID."""
        with self.directory.lock:
            if self.directory.find_doctor(doctor_id) is None:
                raise DoctorNotFound(f"Doctor not found: {doctor_id}")
            if self.directory.find_patient(patient_id) is None:
                raise NotFound(f"Patient not found: {patient_id}")
            if not self.directory.is_slot_available(doctor_id, date_time):
                raise SlotUnavailable(f"Slot {date_time} is not available for doctor {doctor_id}")
            
            appointment = self.directory.add_appointment(Appointment(
                appt_id=self._new_appointment_id("APT"),
                doctor_id=doctor_id,
                patient_id=patient_id,
                date_time=date_time,
            ))
            self.audit.record(f"Booked appointment: {appointment.appt_id}", patient_id)
        
        logger.info(f"Appointment {appointment.appt_id} booked for {doctor_id} at {date_time}")
        return appointment.appt_id
    
    def reschedule(self, appt_id: str, new_date_time: str, actor_id: str) -> Appointment:
        with self.directory.lock:
            appointment = self._get(appt_id)
            if appointment.status != AppointmentStatus.SCHEDULED:
                raise NotPermitted(
                    f"Appointment {appt_id} is {appointment.status.value} and cannot be rescheduled"
                )
            if new_date_time == appointment.date_time:
                return appointment
            if not self.directory.is_slot_available(appointment.doctor_id, new_date_time):
                raise SlotUnavailable(
                    f"Slot {new_date_time} is not available for doctor {appointment.doctor_id}"
                )
            
            appointment.date_time = new_date_time
            self.audit.record(f"Appointment rescheduled: {appt_id}", actor_id)
        
        return appointment
    
    def cancel(
        self,
        appt_id: str,
        actor_id: str,
        actor_role: UserRole,
        status: AppointmentStatus = AppointmentStatus.CANCELLED,
        note: Optional[str] = None
    ) -> Appointment:
        """Cancel an appointment.
        
        Patients may only cancel their own scheduled appointments, and only
        as ``patient-cancelled``. Admins may use any cancellation status and
        attach a free-text note.
        """
        if not status.is_cancellation:
            raise NotPermitted(f"{status.value} is not a cancellation status")
        if note:
            check_fields(note)
        
        with self.directory.lock:
            appointment = self._get(appt_id)
            
            if actor_role == UserRole.PATIENT:
                if appointment.patient_id != actor_id:
                    raise NotPermitted("Patients may only cancel their own appointments")
                if status != AppointmentStatus.PATIENT_CANCELLED:
                    raise NotPermitted("Patients may only cancel as patient-cancelled")
            elif actor_role != UserRole.ADMIN:
                raise NotPermitted(f"Role {actor_role.value} may not cancel appointments")
            
            appointment.transition(status, note)
            action = f"Appointment cancelled: {appt_id} Reason: {status.value}"
            if note:
                action += f" Note: {note}"
            self.audit.record(action, actor_id)
        
        return appointment
    
    def complete(self, appt_id: str, doctor_id: str) -> Appointment:
        with self.directory.lock:
            appointment = self._get(appt_id)
            if appointment.doctor_id != doctor_id:
                raise NotPermitted("Doctors may only complete their own appointments")
            appointment.transition(AppointmentStatus.COMPLETED)
            self.audit.record(f"Appointment completed: {appt_id}", doctor_id)
        
        return appointment
    
    def request_emergency(self, patient_id: str) -> str:
        """Create an emergency appointment with the first on-duty doctor.
        
        Doctors are tried in collection order; one whose slot at the current
        minute is already taken is passed over.
        """
        with self.directory.lock:
            if self.directory.find_patient(patient_id) is None:
                raise NotFound(f"Patient not found: {patient_id}")
            
            now = self.clock().strftime(SLOT_FORMAT)
            doctor = self._first_emergency_doctor(now)
            if doctor is None:
                raise NoDoctorAvailable("No doctors available for emergency right now")
            
            appointment = self.directory.add_appointment(Appointment(
                appt_id=self._new_appointment_id("EMG"),
                doctor_id=doctor.user_id,
                patient_id=patient_id,
                date_time=now,
                is_emergency=True,
            ))
            self.audit.record(
                f"Requested emergency appointment: {appointment.appt_id}", patient_id
            )
        
        logger.info(f"Emergency appointment {appointment.appt_id} assigned to {doctor.user_id}")
        return appointment.appt_id
    
    def mark_emergency_duty(self, doctor_id: str, actor_id: Optional[str] = None) -> int:
        """Put a doctor on emergency duty and cancel their non-emergency
        appointments for today. Returns how many were cancelled."""
        actor_id = actor_id or doctor_id
        
        with self.directory.lock:
            doctor = self.directory.find_doctor(doctor_id)
            if doctor is None:
                raise DoctorNotFound(f"Doctor not found: {doctor_id}")
            
            doctor.on_emergency_duty = True
            today = self.clock().strftime(DATE_FORMAT)
            
            cancelled: List[Appointment] = []
            for appointment in self.directory.appointments:
                if (
                    appointment.doctor_id == doctor_id
                    and appointment.date == today
                    and appointment.status == AppointmentStatus.SCHEDULED
                    and not appointment.is_emergency
                ):
                    appointment.transition(
                        AppointmentStatus.EMERGENCY_CANCELLED,
                        f"Doctor {doctor_id} on emergency duty",
                    )
                    cancelled.append(appointment)
            
            for appointment in cancelled:
                self.audit.record(
                    f"Appointment cancelled: {appointment.appt_id} "
                    f"Reason: {AppointmentStatus.EMERGENCY_CANCELLED.value}",
                    actor_id,
                )
            self.audit.record(f"Marked emergency duty: {doctor_id}", actor_id)
        
        logger.info(
            f"Doctor {doctor_id} on emergency duty, {len(cancelled)} appointments cancelled"
        )
        return len(cancelled)
    
    def _get(self, appt_id: str) -> Appointment:
        appointment = self.directory.find_appointment(appt_id)
        if appointment is None:
            raise NotFound(f"Appointment not found: {appt_id}")
        return appointment
    
    def _first_emergency_doctor(self, date_time: str) -> Optional[Doctor]:
        for doctor in self.directory.doctors:
            if doctor.on_emergency_duty and self.directory.is_slot_available(doctor.user_id, date_time):
                return doctor
        return None
    
    def _new_appointment_id(self, prefix: str) -> str:
        while True:
            appt_id = f"{prefix}-{uuid.uuid4().hex[:12].upper()}"
            if self.directory.find_appointment(appt_id) is None:
                return appt_id
