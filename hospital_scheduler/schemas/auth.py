from pydantic import BaseModel, Field

from ..core.security import UserRole

class UserLogin(BaseModel):
    user_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class IdentityResponse(BaseModel):
    user_id: str
    name: str
    role: UserRole
    
    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: IdentityResponse

class ChangePassword(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
