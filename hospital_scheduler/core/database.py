"""
Flat-file snapshot storage.

One record per line, fields separated by ``|``:

    doctors.txt       id|name|specialization|passwordDigest
    patients.txt      id|name|medicalHistory|passwordDigest
    appointments.txt  apptID|doctorID|patientID|dateTime|status|emergencyFlag

The snapshot is read once at startup and written once at shutdown. I/O
errors propagate to the caller; malformed lines are skipped with a warning.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional
import logging
import shutil

from .config import Settings
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"

@dataclass
class Snapshot:
    doctors: List[Doctor] = field(default_factory=list)
    patients: List[Patient] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)

# Record codec
def check_fields(*fields: str) -> None:
    """Reject values that would break the one-record-per-line encoding."""
    for value in fields:
        if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
            raise ValueError(f"Field may not contain '|' or line breaks: {value!r}")

def encode_record(*fields: str) -> str:
    check_fields(*fields)
    return FIELD_SEPARATOR.join(fields)

def encode_doctor(doctor: Doctor) -> str:
    return encode_record(doctor.user_id, doctor.name, doctor.specialization, doctor.password_digest)

def encode_patient(patient: Patient) -> str:
    return encode_record(patient.user_id, patient.name, patient.medical_history, patient.password_digest)

def encode_appointment(appointment: Appointment) -> str:
    return encode_record(
        appointment.appt_id,
        appointment.doctor_id,
        appointment.patient_id,
        appointment.date_time,
        appointment.status.value,
        "1" if appointment.is_emergency else "0",
    )

def decode_doctor(line: str) -> Doctor:
    user_id, name, specialization, digest = _split(line, 4)
    return Doctor(user_id, name, digest, specialization=specialization)

def decode_patient(line: str) -> Patient:
    user_id, name, history, digest = _split(line, 4)
    return Patient(user_id, name, digest, medical_history=history)

def decode_appointment(line: str) -> Appointment:
    appt_id, doctor_id, patient_id, date_time, status, emergency_flag = _split(line, 6)
    if emergency_flag not in ("0", "1"):
        raise ValueError(f"Invalid emergency flag: {emergency_flag!r}")
    return Appointment(
        appt_id=appt_id,
        doctor_id=doctor_id,
        patient_id=patient_id,
        date_time=date_time,
        status=AppointmentStatus(status),
        is_emergency=emergency_flag == "1",
    )

def _split(line: str, count: int) -> List[str]:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) != count or not fields[0]:
        raise ValueError(f"Expected {count} fields, got {len(fields)}")
    return fields

class FlatFileDatabase:
    def __init__(self, config: Settings):
        self.config = config
    
    @property
    def data_files(self) -> List[Path]:
        return [
            self.config.doctors_path,
            self.config.patients_path,
            self.config.appointments_path,
            self.config.audit_log_path,
        ]
    
    def load_snapshot(self) -> Snapshot:
        """Read all three record files; a missing file is an empty collection."""
        snapshot = Snapshot(
            doctors=self._read(self.config.doctors_path, decode_doctor),
            patients=self._read(self.config.patients_path, decode_patient),
            appointments=self._read(self.config.appointments_path, decode_appointment),
        )
        logger.info(
            f"Loaded {len(snapshot.doctors)} doctors, {len(snapshot.patients)} patients, "
            f"{len(snapshot.appointments)} appointments"
        )
        return snapshot
    
    def save_snapshot(
        self,
        doctors: Iterable[Doctor],
        patients: Iterable[Patient],
        appointments: Iterable[Appointment]
    ) -> None:
        # Encode everything first so a bad record leaves the files untouched
        doctor_lines = [encode_doctor(d) for d in doctors]
        patient_lines = [encode_patient(p) for p in patients]
        appointment_lines = [encode_appointment(a) for a in appointments]
        
        self.config.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self._write(self.config.doctors_path, doctor_lines)
        self._write(self.config.patients_path, patient_lines)
        self._write(self.config.appointments_path, appointment_lines)
        logger.info("Data saved successfully")
    
    def backup(self, now: Optional[datetime] = None) -> Path:
        """Copy the data files and the audit log into a timestamped directory."""
        now = now or datetime.now()
        backup_dir = self.config.BACKUP_ROOT / f"backup_{now.strftime('%Y%m%d_%H%M%S')}"
        backup_dir.mkdir(parents=True, exist_ok=True)
        
        for path in self.data_files:
            if path.exists():
                shutil.copy2(path, backup_dir / path.name)
            else:
                logger.warning(f"Backup skipped missing file {path}")
        
        logger.info(f"Data backup completed to directory: {backup_dir}")
        return backup_dir
    
    def _read(self, path: Path, decode) -> list:
        if not path.exists():
            return []
        
        records = []
        with open(path, "r", encoding="utf-8") as data_file:
            for number, line in enumerate(data_file, start=1):
                line = line.rstrip("\r\n")
                if not line:
                    continue
                try:
                    records.append(decode(line))
                except ValueError as e:
                    logger.warning(f"Skipping malformed record {path.name}:{number}: {e}")
        return records
    
    def _write(self, path: Path, lines: List[str]) -> None:
        with open(path, "w", encoding="utf-8") as data_file:
            for line in lines:
                data_file.write(line + "\n")
