# medicontrol/core/auth.py

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from medicontrol.core.config import Settings
from medicontrol.core.jwt import decode_access_token

# Reads the bearer token from the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")


@dataclass(frozen=True)
class CurrentUser:
    username: str
    user_id: int


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    payload = decode_access_token(token, settings)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    username = payload.get("sub")

    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentUser(
        username=username,
        user_id=int(payload.get("uid", settings.DEFAULT_SALE_USER_ID)),
    )
