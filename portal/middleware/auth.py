from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
import structlog

from portal.services.auth_service import verify_access_token
from portal.services.workflow import Role

logger = structlog.get_logger()

security = HTTPBearer(auto_error=False)


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": "AUTH_TOKEN_INVALID",
                "message": "Invalid or expired token",
            }
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    FastAPI dependency: resolve the session behind the bearer token.

    No token yields an anonymous session with Role.NONE; a bad token is a 401.
    """
    if credentials is None:
        return {"username": None, "role": Role.NONE}
    try:
        payload = verify_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("auth_token_invalid", error=str(e))
        raise _invalid_token()
    return {"username": payload["sub"], "role": Role(payload["role"])}


async def get_current_role(current_user: dict = Depends(get_current_user)) -> Role:
    return current_user["role"]


async def require_portal_role(current_user: dict = Depends(get_current_user)) -> Role:
    """Director or finance only; used by the read endpoints of the dashboard."""
    if current_user["role"] == Role.NONE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "AUTH_REQUIRED",
                    "message": "Sign in as director or finance",
                }
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user["role"]
