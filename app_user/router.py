# app_user/router.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status, Depends
from pydantic import BaseModel

from django.contrib.auth import authenticate, get_user_model

from rest_framework_simplejwt.tokens import RefreshToken, AccessToken
from rest_framework_simplejwt.exceptions import TokenError

from app_core.policies import current_user_is_admin
from web.auth_jwt import get_current_actor

router = APIRouter(tags=["Auth"])
User = get_user_model()


# --------------------------
# Modelos de request/response
# --------------------------
class LoginIn(BaseModel):
    email: str
    password: str


class TokenPair(BaseModel):
    access: str
    refresh: str
    token_type: str = "bearer"
    expires_in: int  # segundos hasta que expire el access


class RefreshIn(BaseModel):
    refresh: str


class ProfileOut(BaseModel):
    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str


class MeOut(BaseModel):
    id: int
    email: str
    is_admin: bool
    profile: Optional[ProfileOut] = None


# --------------------------
# Utilidades
# --------------------------
def _access_expires_in_seconds(access: AccessToken) -> int:
    exp_ts = int(access["exp"])
    now_ts = int(datetime.now(tz=timezone.utc).timestamp())
    return max(exp_ts - now_ts, 0)


# --------------------------
# Login / Refresh
# --------------------------
@router.post("/login", response_model=TokenPair, summary="Login (email + password)")
def login(data: LoginIn):
    # USERNAME_FIELD es email
    user = authenticate(username=data.email, password=data.password)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    refresh = RefreshToken.for_user(user)
    access = refresh.access_token
    access["email"] = user.email

    return TokenPair(
        access=str(access),
        refresh=str(refresh),
        expires_in=_access_expires_in_seconds(access),
    )


@router.post("/refresh", response_model=TokenPair, summary="Refresh token")
def refresh_token(body: RefreshIn):
    try:
        refresh = RefreshToken(body.refresh)
    except TokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    access = refresh.access_token
    return TokenPair(
        access=str(access),
        refresh=str(refresh),  # mismo refresh, no se rota
        expires_in=_access_expires_in_seconds(access),
    )


@router.get("/me", response_model=MeOut, summary="Current user")
def me(actor=Depends(get_current_actor)):
    profile = getattr(actor, "profile", None)
    return MeOut(
        id=actor.pk,
        email=actor.email,
        is_admin=current_user_is_admin(actor),
        profile=ProfileOut(
            id=profile.pk,
            first_name=profile.first_name,
            last_name=profile.last_name,
            role=profile.role,
        ) if profile else None,
    )
