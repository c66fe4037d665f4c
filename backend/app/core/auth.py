"""
Authentication dependencies for the storefront backend
Validates session JWTs issued by the auth framework and resolves the acting account
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.domain.actor import Actor
from app.repositories.user_repository import UserRepository


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: str
    name: Optional[str] = None


def _auth_failed(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"success": False, "message": message, "code": "AUTH_FAILED"},
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_session_token(token: str) -> dict:
    """
    Decode and validate a session JWT.

    Expected payload:
    {
        "sub": "user_id",
        "id": "user_id",
        "email": "jane@example.com",
        "name": "Jane",
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    if not settings.AUTH_SECRET:
        raise ValueError("AUTH_SECRET environment variable is not set")

    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.AUTH_ALGORITHM],
            options={"verify_aud": False}  # The auth framework doesn't set audience
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise _auth_failed("Token has expired")
        raise _auth_failed("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise _auth_failed("Authentication required")

    payload = decode_session_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")

    if not user_id or not email:
        raise _auth_failed("Invalid token payload: missing user id or email")

    return TokenUser(id=str(user_id), email=email, name=payload.get("name"))


def get_current_actor(
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Actor:
    """
    Resolve the authenticated token user to the stored account.

    The active flag is returned as-is; callers decide what an inactive
    account may do.
    """
    account = UserRepository().find_by_id(db, user.id)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"success": False, "message": "User not found", "code": "USER_NOT_FOUND"}
        )
    return account
