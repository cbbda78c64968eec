from fastapi import APIRouter, Depends, HTTPException, status
import structlog

from portal.config import settings
from portal.middleware.auth import require_portal_role, get_current_user
from portal.schemas.auth import LoginRequest, TokenResponse, SessionResponse
from portal.services.auth_service import authenticate, create_access_token

logger = structlog.get_logger()

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    """Check the static credential table and return a bearer token."""
    user = authenticate(body.username, body.password)
    if not user:
        logger.warning("login_failed", username=body.username.lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "AUTH_INVALID_CREDENTIALS",
                    "message": "Invalid username or password",
                }
            },
        )

    logger.info("user_logged_in", username=user.username, role=user.role.value)

    return TokenResponse(
        access_token=create_access_token(user.username, user.role),
        token_type="Bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        role=user.role.value,
    )


@router.get("/me", response_model=SessionResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    _auth=Depends(require_portal_role),
):
    return SessionResponse(
        username=current_user["username"],
        role=current_user["role"].value,
    )
