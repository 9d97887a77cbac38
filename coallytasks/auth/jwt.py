"""JWT token generation and validation for coallytasks."""

import logging
import jwt
from datetime import datetime, timedelta
from typing import Optional

from coallytasks.config import Settings
from coallytasks.errors import Unauthorized

logger = logging.getLogger(__name__)

# Fixed validity window for every issued token
ACCESS_TOKEN_TTL = timedelta(hours=1)


def create_access_token(user_id: str, settings: Settings, now: Optional[datetime] = None) -> str:
    """Create a JWT access token for a user.

    Args:
        user_id: User ID to encode in token
        settings: Settings holding the signing secret and algorithm
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT token string
    """
    issued_at = now or datetime.utcnow()
    payload = {
        "sub": user_id,  # Subject (user ID)
        "iat": issued_at,  # Issued at
        "exp": issued_at + ACCESS_TOKEN_TTL,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """Validate a JWT access token and return the user ID it carries.

    Args:
        token: JWT token string to decode
        settings: Settings holding the signing secret and algorithm

    Returns:
        User ID string

    Raises:
        Unauthorized: If the token is malformed, badly signed, expired or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        raise Unauthorized()
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected invalid token: {type(e).__name__}")
        raise Unauthorized()

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized()
    return user_id
