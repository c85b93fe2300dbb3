import pytest

from hospital_scheduler.core.errors import DuplicateID
from hospital_scheduler.models.appointment import Appointment, AppointmentStatus
from hospital_scheduler.models.doctor import Doctor
from hospital_scheduler.models.patient import Patient
from hospital_scheduler.models.user import Admin
from hospital_scheduler.services.directory import Directory

def make_appointment(appt_id, status=AppointmentStatus.SCHEDULED, date_time="2025-04-05 10:00",
                     doctor_id="D1", patient_id="P1", is_emergency=False):
    return Appointment(appt_id, doctor_id, patient_id, date_time, status, is_emergency)

class TestLookups:
    
    def test_find_returns_none_on_miss(self, directory):
        """Lookups report a miss as None, not an exception."""
        assert directory.find_doctor("nobody") is None
        assert directory.find_patient("nobody") is None
        assert directory.find_appointment("nobody") is None
    
    def test_find_by_id(self, directory):
        assert directory.find_doctor("D1").name == "Gregory House"
        assert directory.find_patient("P2").name == "Jane Roe"
        assert directory.find_admin("admin1").name == "System Administrator"
    
    def test_collections_are_read_only_views(self, directory):
        doctors = directory.doctors
        assert isinstance(doctors, tuple)
        assert [d.user_id for d in doctors] == ["D1", "D2"]

class TestSlotAvailability:
    
    @pytest.mark.parametrize("status,available", [
        (AppointmentStatus.SCHEDULED, False),
        (AppointmentStatus.COMPLETED, False),
        (AppointmentStatus.CANCELLED, True),
        (AppointmentStatus.PATIENT_CANCELLED, True),
        (AppointmentStatus.EMERGENCY_CANCELLED, True),
    ])
    def test_only_active_statuses_hold_a_slot(self, directory, status, available):
        directory.add_appointment(make_appointment("A1", status))
        assert directory.is_slot_available("D1", "2025-04-05 10:00") is available
    
    def test_exact_string_match(self, directory):
        """Neighbouring times and other doctors do not conflict."""
        directory.add_appointment(make_appointment("A1"))
        assert directory.is_slot_available("D1", "2025-04-05 10:01")
        assert directory.is_slot_available("D2", "2025-04-05 10:00")
        assert not directory.is_slot_available("D1", "2025-04-05 10:00")

class TestInserts:
    
    def test_duplicate_doctor_id_rejected(self, directory):
        with pytest.raises(DuplicateID):
            directory.add_doctor(Doctor("D1", "Other", "digest", specialization="ENT"))
    
    def test_user_id_unique_across_roles(self, directory):
        with pytest.raises(DuplicateID):
            directory.add_patient(Patient("D2", "Imposter", "digest"))
        with pytest.raises(DuplicateID):
            directory.add_doctor(Doctor("admin1", "Imposter", "digest"))
    
    def test_duplicate_appointment_id_rejected(self, directory):
        directory.add_appointment(make_appointment("A1"))
        with pytest.raises(DuplicateID):
            directory.add_appointment(make_appointment("A1", date_time="2025-04-06 10:00"))
        assert len(directory.appointments) == 1
    
    def test_add_appointment_links_patient(self, directory):
        directory.add_appointment(make_appointment("A1"))
        assert directory.find_patient("P1").appointment_ids == ["A1"]
    
    def test_admin_may_share_id_with_loaded_doctor(self):
        directory = Directory()
        directory.add_doctor(Doctor("admin1", "Dr Admin", "digest"))
        directory.add_admin(Admin("admin1", "System Administrator", "digest"))
        assert directory.find_user("admin1").role.value == "doctor"

class TestRestore:
    
    def test_restore_rebuilds_patient_appointment_ids(self):
        directory = Directory()
        patients = [Patient("P1", "John", "d"), Patient("P2", "Jane", "d")]
        appointments = [
            make_appointment("A1", patient_id="P2"),
            make_appointment("A2", patient_id="P1", date_time="2025-04-05 11:00"),
            make_appointment("A3", patient_id="P2", date_time="2025-04-05 12:00"),
        ]
        directory.restore([], patients, appointments)
        
        assert directory.find_patient("P1").appointment_ids == ["A2"]
        assert directory.find_patient("P2").appointment_ids == ["A1", "A3"]
    
    def test_restore_drops_duplicate_records(self, caplog):
        directory = Directory()
        directory.restore(
            [Doctor("D1", "First", "d"), Doctor("D1", "Second", "d")],
            [],
            [make_appointment("A1"), make_appointment("A1", date_time="2025-04-06 10:00")],
        )
        assert [d.name for d in directory.doctors] == ["First"]
        assert len(directory.appointments) == 1
        assert "duplicate" in caplog.text
    
    def test_count_by_status(self, directory):
        directory.add_appointment(make_appointment("A1"))
        directory.add_appointment(make_appointment("A2", AppointmentStatus.CANCELLED))
        counts = directory.count_by_status()
        assert counts[AppointmentStatus.SCHEDULED] == 1
        assert counts[AppointmentStatus.CANCELLED] == 1
        assert counts[AppointmentStatus.COMPLETED] == 0
