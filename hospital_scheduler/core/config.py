from pydantic_settings import BaseSettings
from typing import List
import os
from pathlib import Path

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Hospital Scheduling System"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")
    
    # Flat-file snapshot storage
    DATA_DIR: Path = Path("data")
    DOCTORS_FILE: str = "doctors.txt"
    PATIENTS_FILE: str = "patients.txt"
    APPOINTMENTS_FILE: str = "appointments.txt"
    AUDIT_LOG_FILE: str = "audit_log.txt"
    BACKUP_ROOT: Path = Path("backups")
    
    # Built-in admin, seeded on every startup (admins are never persisted)
    ADMIN_ID: str = "admin1"
    ADMIN_NAME: str = "System Administrator"
    ADMIN_PASSWORD: str = "admin123"
    
    # Security
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    
    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]
    
    @property
    def doctors_path(self) -> Path:
        return self.DATA_DIR / self.DOCTORS_FILE
    
    @property
    def patients_path(self) -> Path:
        return self.DATA_DIR / self.PATIENTS_FILE
    
    @property
    def appointments_path(self) -> Path:
        return self.DATA_DIR / self.APPOINTMENTS_FILE
    
    @property
    def audit_log_path(self) -> Path:
        return self.DATA_DIR / self.AUDIT_LOG_FILE
    
    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
