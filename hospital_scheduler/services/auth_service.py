from dataclasses import dataclass

from ..core.errors import AuthFailure
from ..core.security import UserRole
from ..models.user import User
from .audit_service import AuditLog
from .directory import Directory

@dataclass(frozen=True)
class Identity:
    """Role-tagged handle for an authenticated user."""
    user_id: str
    name: str
    role: UserRole

class AuthService:
    def __init__(self, directory: Directory, audit: AuditLog):
        self.directory = directory
        self.audit = audit
    
    def authenticate(self, user_id: str, password: str) -> Identity:
        """Check credentials against doctors, then patients, then admins.
        
        The first account with a matching ID and password wins, so an ID
        shared across roles resolves in that priority order.
        """
        directory = self.directory
        with directory.lock:
            for users in (directory.doctors, directory.patients, directory.admins):
                for user in users:
                    if user.user_id == user_id and user.verify_password(password):
                        return identity_for(user)
        
        raise AuthFailure("Invalid user ID or password")
    
    def resolve(self, user_id: str, role: UserRole) -> User:
        """Look up the account behind an identity issued earlier."""
        finders = {
            UserRole.DOCTOR: self.directory.find_doctor,
            UserRole.PATIENT: self.directory.find_patient,
            UserRole.ADMIN: self.directory.find_admin,
        }
        user = finders[role](user_id)
        if user is None:
            raise AuthFailure("User not found")
        return user
    
    def change_password(self, identity: Identity, current_password: str, new_password: str) -> None:
        with self.directory.lock:
            user = self.resolve(identity.user_id, identity.role)
            if not user.verify_password(current_password):
                raise AuthFailure("Current password is incorrect")
            user.set_password(new_password)
            self.audit.record("Password changed", identity.user_id)

def identity_for(user: User) -> Identity:
    return Identity(user_id=user.user_id, name=user.name, role=user.role)
