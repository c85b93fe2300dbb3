from dataclasses import dataclass
from typing import ClassVar

from ..core.security import UserRole, get_password_hash, verify_password

@dataclass
class User:
    """Common state of every account; ``password_digest`` never holds plaintext."""
    user_id: str
    name: str
    password_digest: str
    
    role: ClassVar[UserRole]
    
    @classmethod
    def create(cls, user_id: str, name: str, password: str, **fields):
        """Build an account from a plaintext password."""
        return cls(user_id, name, get_password_hash(password), **fields)
    
    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.password_digest)
    
    def set_password(self, password: str) -> None:
        self.password_digest = get_password_hash(password)
    
    def __repr__(self):
        return f"<{self.__class__.__name__}(id='{self.user_id}', name='{self.name}')>"

@dataclass(repr=False)
class Admin(User):
    role: ClassVar[UserRole] = UserRole.ADMIN
