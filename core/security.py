"""
JWT token generation and validation.

SECURITY REQUIREMENTS:
- JWT_SECRET must be set via environment variable
- JWT_SECRET must be different for each environment (dev/staging/prod)
- JWT_SECRET must NEVER be committed to source control
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import JWTError, jwt

ALGORITHM = "HS256"


def create_access_token(
    data: Dict,
    secret: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=7))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> Optional[Dict]:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
