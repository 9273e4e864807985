import bcrypt
from jose import JWTError, jwt
from app.config import settings
from app.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])

        # Validate expiration (jose checks this automatically)
        exp = payload.get("exp")
        if exp is None:
            raise UnauthorizedException("Token missing expiration")

        # Extract user_id from 'sub' claim
        user_id: str = payload.get("sub")
        if user_id is None:
            raise UnauthorizedException("Token missing user identifier")

        return payload

    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_id(token: str) -> int:
    """Extract the owning user id from JWT token"""
    payload = decode_jwt(token)
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedException("Token user identifier is not a valid user id")


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
