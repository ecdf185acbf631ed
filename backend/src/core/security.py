"""Password hashing and identity token helpers."""
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import Settings
from core.errors import AppError, ErrorKind

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

TOKEN_USER_CLAIM = "userId"


def hash_password(password: str) -> str:
    """Hash a plain text password for storage."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a plain text password against a stored hash."""
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        # Malformed or unknown hash format in the store
        return False


def create_access_token(
    user_id: int,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token carrying the user id, valid for the configured duration."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(hours=settings.jwt_expiration_hours)
    )
    claims = {TOKEN_USER_CLAIM: user_id, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """
    Verify a token's signature and expiry and return the user id it carries.

    Raises:
        AppError: AUTHENTICATION (401) if the token is invalid, expired,
            or does not carry a user id.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AppError(ErrorKind.AUTHENTICATION, "Invalid or expired token") from e

    user_id = payload.get(TOKEN_USER_CLAIM)
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise AppError(ErrorKind.AUTHENTICATION, "Invalid or expired token")
    return user_id
