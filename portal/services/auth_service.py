from datetime import datetime, timedelta, timezone
from dataclasses import dataclass
from typing import Optional
import hmac

from jose import jwt, JWTError
import structlog

from portal.config import settings
from portal.services.workflow import Role

logger = structlog.get_logger()


@dataclass(frozen=True)
class Credential:
    username: str
    password: str
    role: Role


def valid_users() -> tuple[Credential, ...]:
    """The two fixed portal identities. Passwords come from settings."""
    return (
        Credential("director", settings.DIRECTOR_PASSWORD, Role.DIRECTOR),
        Credential("finance", settings.FINANCE_PASSWORD, Role.FINANCE),
    )


# ---------- credential check ----------

def authenticate(username: str, password: str) -> Optional[Credential]:
    """Case-insensitive on username, case-sensitive on password."""
    name = username.strip().lower()
    for user in valid_users():
        if user.username == name and hmac.compare_digest(
            user.password.encode(), password.encode()
        ):
            return user
    return None


# ---------- token generation ----------

def create_access_token(username: str, role: Role) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": username,
        "role": role.value,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "type": "access",
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# ---------- token verification ----------

def decode_token(token: str) -> dict:
    """Decode and verify a JWT token. Raises JWTError on failure."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def verify_access_token(token: str) -> dict:
    """Verify an access token and return its claims."""
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    if payload.get("role") not in (Role.DIRECTOR.value, Role.FINANCE.value):
        raise JWTError("Token carries no portal role")
    return payload
