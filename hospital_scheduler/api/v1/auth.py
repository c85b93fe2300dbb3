from fastapi import APIRouter, Depends

from ...api.deps import get_current_session, get_system
from ...core.security import create_access_token
from ...schemas.auth import ChangePassword, IdentityResponse, TokenResponse, UserLogin
from ...services.session import Session
from ...services.system import HospitalSystem

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: UserLogin,
    system: HospitalSystem = Depends(get_system)
):
    """Authenticate user and return an access token."""
    session = system.dispatcher.login(login_data.user_id, login_data.password)
    token = create_access_token(session.identity.user_id, session.role, system.config)
    
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=IdentityResponse.model_validate(session.identity)
    )

@router.post("/logout")
async def logout(session: Session = Depends(get_current_session)):
    """End the login session."""
    session.logout()
    return {"message": "Successfully logged out"}

@router.get("/me", response_model=IdentityResponse)
async def get_current_user_info(session: Session = Depends(get_current_session)):
    """Get current user information."""
    return IdentityResponse.model_validate(session.identity)

@router.get("/permissions")
async def get_permissions(session: Session = Depends(get_current_session)):
    """List the operations available to the current role."""
    return {
        "role": session.role.value,
        "operations": sorted(op.value for op in session.permitted_operations)
    }

@router.post("/change-password")
async def change_password(
    password_data: ChangePassword,
    session: Session = Depends(get_current_session)
):
    """Change user password."""
    session.change_password(password_data.current_password, password_data.new_password)
    return {"message": "Password changed successfully"}
