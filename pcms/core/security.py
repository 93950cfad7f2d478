from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import jwt

from pcms.core.config import settings

# Static principal for the development token
DEV_SUBJECT = "dev-user"
DEV_NAME = "Developer"
DEV_ROLE = "Admin"


def create_access_token(subject: str, data: Dict[str, Any]) -> str:
    """Create JWT access token"""
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "iat": now,
        "sub": subject,
        "token_type": "access"
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_dev_token() -> str:
    """Mint a token for the fixed development principal"""
    return create_access_token(DEV_SUBJECT, {"name": DEV_NAME, "role": DEV_ROLE})


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None


def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
    """Verify token and check token type"""
    payload = decode_token(token)
    if not payload:
        return None

    if payload.get("token_type") != token_type:
        return None

    return payload
