from fastapi import APIRouter, Depends, HTTPException, Request, status

from medicontrol.core.auth import get_settings
from medicontrol.core.config import Settings
from medicontrol.core.hashing import verify_password
from medicontrol.core.jwt import create_access_token
from medicontrol.core.rate_limiter import limiter
from medicontrol.schemas.auth import LoginRequest, TokenResponse

router = APIRouter(prefix="/api", tags=["Authentication"])


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    credentials: LoginRequest,
    settings: Settings = Depends(get_settings),
):
    password_hash = request.app.state.admin_password_hash

    if credentials.username != settings.ADMIN_USERNAME or not verify_password(
        credentials.password, password_hash
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    access_token = create_access_token(
        data={"sub": settings.ADMIN_USERNAME, "uid": settings.ADMIN_USER_ID},
        settings=settings,
    )

    return TokenResponse(token=access_token)
