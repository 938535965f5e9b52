from jose import JWTError, jwt
from case_manager.config import settings
from case_manager.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub', 'user_type', 'center_id', 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # Validate expiration (jose checks the value, not its presence)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    if payload.get("user_type", payload.get("role")) is None:
        raise UnauthorizedException("Token missing role")

    return payload


def extract_principal_claims(token: str) -> dict:
    """
    Extract the claims a Principal is built from.

    The centre claim is passed through untouched; normalisation happens in
    the tenancy layer so that a malformed value fails closed there.
    """
    payload = decode_jwt(token)
    return {
        "username": payload.get("username") or payload["sub"],
        "role": payload.get("user_type", payload.get("role")),
        "center_id": payload.get("center_id"),
    }
