import pytest
from datetime import datetime

from hospital_scheduler.core.config import Settings
from hospital_scheduler.models.doctor import Doctor
from hospital_scheduler.models.patient import Patient
from hospital_scheduler.services.system import build_system

TODAY = "2025-04-05"

class FixedClock:
    """Clock that always returns ``now`` until a test moves it."""
    
    def __init__(self, now: datetime):
        self.now = now
    
    def __call__(self) -> datetime:
        return self.now

@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 4, 5, 9, 30, 15))

@pytest.fixture
def config(tmp_path):
    return Settings(
        TESTING=True,
        DATA_DIR=tmp_path / "data",
        BACKUP_ROOT=tmp_path / "backups",
        SECRET_KEY="test-secret-key",
    )

@pytest.fixture
def system(config, clock):
    hospital = build_system(config, clock=clock)
    hospital.startup()
    return hospital

@pytest.fixture
def populated(system):
    """System with doctors D1, D2 and patients P1, P2 (password ``secret``)."""
    directory = system.directory
    directory.add_doctor(Doctor.create("D1", "Gregory House", "secret", specialization="Diagnostics"))
    directory.add_doctor(Doctor.create("D2", "Lisa Cuddy", "secret", specialization="Endocrinology"))
    directory.add_patient(Patient.create("P1", "John Doe", "secret", medical_history="Asthma"))
    directory.add_patient(Patient.create("P2", "Jane Roe", "secret", medical_history="None"))
    return system

@pytest.fixture
def engine(populated):
    return populated.appointments

@pytest.fixture
def directory(populated):
    return populated.directory
