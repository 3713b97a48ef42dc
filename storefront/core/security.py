"""
Security utilities - JWT validation

Access tokens are issued elsewhere; this backend only
verifies them.
"""
from typing import Optional

from jose import JWTError, jwt

from storefront.core.config import settings


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_sub": False}
        )
        return payload
    except JWTError:
        return None
