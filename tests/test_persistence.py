import pytest
from datetime import datetime

from hospital_scheduler.core.security import UserRole
from hospital_scheduler.core.database import (
    FlatFileDatabase, decode_appointment, encode_appointment, encode_doctor, encode_record
)
from hospital_scheduler.models.appointment import Appointment, AppointmentStatus
from hospital_scheduler.models.doctor import Doctor
from hospital_scheduler.services.system import build_system

class TestRecordEncoding:
    
    def test_doctor_line(self):
        doctor = Doctor("D1", "Gregory House", "digest", specialization="Diagnostics")
        assert encode_doctor(doctor) == "D1|Gregory House|Diagnostics|digest"
    
    def test_appointment_line(self):
        appointment = Appointment("A1", "D1", "P1", "2025-04-05 10:00",
                                  AppointmentStatus.EMERGENCY_CANCELLED, True)
        assert encode_appointment(appointment) == "A1|D1|P1|2025-04-05 10:00|emergency-cancelled|1"
    
    def test_decode_legacy_appointment(self):
        appointment = decode_appointment("41|D1|P1|2025-04-05 10:00|patient-cancelled|0")
        assert appointment.appt_id == "41"
        assert appointment.status == AppointmentStatus.PATIENT_CANCELLED
        assert appointment.is_emergency is False
    
    @pytest.mark.parametrize("value", ["a|b", "line\nbreak"])
    def test_separator_in_field_rejected(self, value):
        with pytest.raises(ValueError):
            encode_record("D1", value)

class TestSnapshot:
    
    def test_missing_files_load_empty(self, config):
        snapshot = FlatFileDatabase(config).load_snapshot()
        assert snapshot.doctors == []
        assert snapshot.patients == []
        assert snapshot.appointments == []
    
    def test_round_trip(self, populated, config, clock):
        """save followed by load reproduces every persisted field."""
        engine = populated.appointments
        first = engine.book("P1", "D1", "2025-04-05 10:00")
        engine.book("P2", "D2", "2025-04-06 14:00")
        engine.cancel(first, "admin1", UserRole.ADMIN)
        engine.mark_emergency_duty("D2")
        engine.request_emergency("P2")
        populated.shutdown()
        
        reloaded = build_system(config, clock=clock)
        reloaded.startup()
        
        original, restored = populated.directory, reloaded.directory
        assert restored.doctors == tuple(
            Doctor(d.user_id, d.name, d.password_digest, specialization=d.specialization)
            for d in original.doctors
        )
        assert restored.patients == original.patients
        assert [
            (a.appt_id, a.doctor_id, a.patient_id, a.date_time, a.status, a.is_emergency)
            for a in restored.appointments
        ] == [
            (a.appt_id, a.doctor_id, a.patient_id, a.date_time, a.status, a.is_emergency)
            for a in original.appointments
        ]
    
    def test_reloaded_passwords_still_verify(self, populated, config, clock):
        """Stored digests are loaded as-is, never hashed a second time."""
        populated.shutdown()
        
        reloaded = build_system(config, clock=clock)
        reloaded.startup()
        
        assert reloaded.auth.authenticate("D1", "secret").user_id == "D1"
        assert reloaded.auth.authenticate("P2", "secret").user_id == "P2"
    
    def test_admin_seeded_not_persisted(self, populated, config):
        populated.shutdown()
        
        for path in (config.doctors_path, config.patients_path, config.appointments_path):
            assert "admin1" not in path.read_text()
        assert populated.directory.find_admin("admin1") is not None
    
    def test_malformed_lines_skipped(self, config, caplog):
        config.DATA_DIR.mkdir(parents=True)
        config.appointments_path.write_text(
            "A1|D1|P1|2025-04-05 10:00|scheduled|0\n"
            "broken line\n"
            "A2|D1|P1|2025-04-05 11:00|unknown-status|0\n"
            "A3|D1|P1|2025-04-05 12:00|scheduled|2\n"
            "\n"
            "A4|D1|P1|2025-04-05 13:00|completed|1\n"
        )
        
        snapshot = FlatFileDatabase(config).load_snapshot()
        
        assert [a.appt_id for a in snapshot.appointments] == ["A1", "A4"]
        assert "Skipping malformed record" in caplog.text
    
    def test_unreadable_data_dir_aborts_startup(self, config, clock):
        config.DATA_DIR.mkdir(parents=True)
        config.doctors_path.mkdir()
        
        with pytest.raises(OSError):
            build_system(config, clock=clock).startup()

class TestBackup:
    
    def test_backup_copies_existing_files(self, populated, config):
        populated.shutdown()
        
        backup_dir = populated.database.backup(datetime(2025, 4, 5, 18, 0, 0))
        
        assert backup_dir == config.BACKUP_ROOT / "backup_20250405_180000"
        assert (backup_dir / "doctors.txt").read_text() == config.doctors_path.read_text()
        assert (backup_dir / "patients.txt").exists()
        assert (backup_dir / "appointments.txt").exists()
    
    def test_backup_skips_missing_files(self, config):
        backup_dir = FlatFileDatabase(config).backup(datetime(2025, 4, 5, 18, 0, 0))
        assert list(backup_dir.iterdir()) == []
