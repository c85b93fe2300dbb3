from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from ..core.errors import AuthFailure
from ..core.security import security, verify_token, AuthenticationError, TokenPayload
from ..services.auth_service import identity_for
from ..services.session import Session
from ..services.system import HospitalSystem

def get_system(request: Request) -> HospitalSystem:
    """Get the running hospital system."""
    return request.app.state.system

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    system: HospitalSystem = Depends(get_system)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token_payload = verify_token(credentials.credentials, system.config)
    if not token_payload or not token_payload.sub or not token_payload.role:
        raise AuthenticationError("Invalid or expired token")
    
    return token_payload

async def get_current_session(
    token_payload: TokenPayload = Depends(get_current_user_token),
    system: HospitalSystem = Depends(get_system)
) -> Session:
    """Open a role-scoped session for the account behind the token."""
    try:
        user = system.auth.resolve(token_payload.sub, token_payload.role)
    except AuthFailure:
        raise AuthenticationError("User not found")
    
    return system.dispatcher.open_session(identity_for(user))
