"""
Authentication dependencies for FastAPI.

Session handling lives in the external auth collaborator. This service only
checks that the bearer token carries a valid signature and an actor.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from trip_ledger.app.core.exceptions import AuthenticationError
from trip_ledger.app.core.jwt import decode_access_token

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    FastAPI dependency for JWT authentication.
    
    Returns:
        Decoded token payload containing at least ``user_id`` and ``sub``
        
    Raises:
        AuthenticationError: 401 if the token is missing, invalid or has no actor
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")
    
    if not payload.get("user_id"):
        raise AuthenticationError("Invalid token payload")
    
    return payload
