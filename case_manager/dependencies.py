import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from case_manager.core.security import extract_principal_claims
from case_manager.core.exceptions import UnauthorizedException
from case_manager.models.principal import Principal

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 from our own handler
security = HTTPBearer(auto_error=False)


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    """
    FastAPI dependency to validate the JWT and build the request Principal.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Read username, role (user_type) and centre claims
    4. Build an immutable Principal; App Admin's centre is discarded

    Raises:
        UnauthorizedException: If token missing, invalid, expired, or has an unknown role
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    claims = extract_principal_claims(credentials.credentials)
    try:
        return Principal.from_claims(**claims)
    except ValueError as e:
        logger.info("Rejected token: %s", e)
        raise UnauthorizedException(str(e))
