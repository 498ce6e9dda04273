from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from django.conf import settings
from django.contrib.auth import get_user_model

bearer_scheme = HTTPBearer()


def decode_token(token: str) -> dict:
    secret_key = getattr(settings, "JWT_SECRET_KEY", settings.SECRET_KEY)
    algorithm = getattr(settings, "JWT_ALGORITHM", "HS256")
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def decode_access_token(token: str) -> dict:
    """Como ``decode_token`` pero rechaza refresh tokens."""
    payload = decode_token(token)
    if payload.get("token_type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )
    return payload


# Depende del token tipo Bearer en la cabecera Authorization
def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    return decode_access_token(credentials.credentials)


def user_from_payload(payload: dict):
    User = get_user_model()
    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User is inactive")
    return user


# Actor de las reglas de acceso: el usuario Django detrás del token
def get_current_actor(current_user: dict = Depends(get_current_user)):
    return user_from_payload(current_user)
