# uniportal/core/security.py
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import jwt
from passlib.context import CryptContext
from uniportal.core.config import settings

# 1. Configuration
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGORITHM = "HS256"


# 2. Password Handling
def _pre_hash_password(password: str) -> str:
    """
    bcrypt only looks at the first 72 bytes. Longer passwords are
    SHA-256 hashed first so the whole password still counts.
    """
    if len(password.encode("utf-8")) <= 72:
        return password
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_pre_hash_password(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(_pre_hash_password(plain_password), hashed_password)
    except ValueError:
        # Malformed / non-bcrypt hash stored for this account
        return False


# 3. Token Creation (API clients)
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    data: Optional[dict] = None
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "id": str(subject),
        "exp": expire,
        "iat": now,
        "nbf": now,
    }

    # Principal claims (role, status, username, ...) ride along
    if data:
        to_encode.update({k: v for k, v in data.items() if k not in ("exp", "iat", "nbf")})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


# 4. Decoding (raises jwt.PyJWTError subclasses on any problem)
def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_exp": True}
    )
