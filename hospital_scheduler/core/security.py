from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum

from .config import Settings, settings

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# JWT Security
security = HTTPBearer()

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    role: Optional[UserRole] = None
    exp: Optional[int] = None

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its digest."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Digest not produced by any configured scheme
        return False

def get_password_hash(password: str) -> str:
    """Generate password digest."""
    return pwd_context.hash(password)

# JWT utilities
def create_access_token(
    user_id: str,
    role: UserRole,
    config: Settings = settings,
    expires_delta: Optional[timedelta] = None
) -> Token:
    """Create a JWT access token for a login session."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    
    to_encode = {
        "sub": user_id,
        "role": role.value,
        "exp": datetime.utcnow() + expires_delta,
    }
    
    encoded_jwt = jwt.encode(
        to_encode,
        config.SECRET_KEY,
        algorithm=config.ALGORITHM
    )
    return Token(
        access_token=encoded_jwt,
        expires_in=int(expires_delta.total_seconds())
    )

def verify_token(token: str, config: Settings = settings) -> Optional[TokenPayload]:
    """Verify and decode JWT token."""
    try:
        payload = jwt.decode(
            token,
            config.SECRET_KEY,
            algorithms=[config.ALGORITHM]
        )
        
        return TokenPayload(**payload)
    
    except (JWTError, ValueError):
        return None

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
