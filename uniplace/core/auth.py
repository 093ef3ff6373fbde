"""
Identity for API requests.

Bearer JWTs are issued by the hosted auth service and verified here:
- get_current_user: any signed-in student or admin
- get_current_admin: admin console routes only

A user is an admin when the token's app_metadata.role is "admin" or
their e-mail is listed in ADMIN_EMAILS.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

load_dotenv()

JWT_SECRET = os.getenv("AUTH_JWT_SECRET", "change-this-secret")
JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE") or None
ADMIN_EMAILS = {
    e.strip().lower()
    for e in os.getenv("ADMIN_EMAILS", "").split(",")
    if e.strip()
}

# Bearer token extractor
bearer_scheme = HTTPBearer()


@dataclass
class CurrentUser:
    id: str
    email: str
    name: str
    is_admin: bool = False


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT. Returns None when invalid or expired."""
    options = {"verify_aud": JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None


def user_from_claims(claims: dict) -> Optional[CurrentUser]:
    """Build the request identity from verified token claims."""
    user_id = claims.get("sub")
    if not user_id:
        return None

    email = (claims.get("email") or "").strip()
    user_metadata = claims.get("user_metadata") or {}
    app_metadata = claims.get("app_metadata") or {}

    name = user_metadata.get("full_name") or email or "Student"
    is_admin = app_metadata.get("role") == "admin" or email.lower() in ADMIN_EMAILS

    return CurrentUser(id=str(user_id), email=email, name=name, is_admin=is_admin)


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> CurrentUser:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/blogs/mine")
        def my_blogs(user: CurrentUser = Depends(get_current_user)):
            ...
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_token(credentials.credentials)
    if not claims:
        raise credentials_exception

    user = user_from_claims(claims)
    if user is None:
        raise credentials_exception
    return user


async def get_current_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency - Require the admin role."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admins only")
    return user
