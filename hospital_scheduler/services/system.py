from dataclasses import dataclass
from datetime import datetime
from typing import Callable
import logging

from ..core.config import Settings
from ..core.database import FlatFileDatabase
from ..models.user import Admin
from .appointment_service import AppointmentService
from .audit_service import AuditLog
from .auth_service import AuthService
from .directory import Directory
from .session import SessionDispatcher

logger = logging.getLogger(__name__)

@dataclass
class HospitalSystem:
    """Explicitly wired services for one running instance."""
    config: Settings
    directory: Directory
    audit: AuditLog
    auth: AuthService
    appointments: AppointmentService
    database: FlatFileDatabase
    dispatcher: SessionDispatcher
    
    def startup(self) -> None:
        """Load the snapshot and seed the built-in admin account."""
        snapshot = self.database.load_snapshot()
        self.directory.restore(snapshot.doctors, snapshot.patients, snapshot.appointments)
        if self.directory.find_admin(self.config.ADMIN_ID) is None:
            self.directory.add_admin(Admin.create(
                self.config.ADMIN_ID,
                self.config.ADMIN_NAME,
                self.config.ADMIN_PASSWORD,
            ))
        logger.info("Data loaded successfully")
    
    def shutdown(self) -> None:
        with self.directory.lock:
            self.database.save_snapshot(
                self.directory.doctors,
                self.directory.patients,
                self.directory.appointments,
            )

def build_system(config: Settings, clock: Callable[[], datetime] = datetime.now) -> HospitalSystem:
    directory = Directory()
    audit = AuditLog(config.audit_log_path, clock=clock)
    auth = AuthService(directory, audit)
    appointments = AppointmentService(directory, audit, clock=clock)
    database = FlatFileDatabase(config)
    dispatcher = SessionDispatcher(directory, auth, appointments, audit, database)
    return HospitalSystem(
        config=config,
        directory=directory,
        audit=audit,
        auth=auth,
        appointments=appointments,
        database=database,
        dispatcher=dispatcher,
    )
