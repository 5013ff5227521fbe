"""
Authentication - JWT and password handling.

Provides:
- bcrypt password hashing
- HS256 access tokens carrying the user id
- FastAPI dependencies: any signed-in user, admins only

The role is always read from the users table, so a promotion or demotion
takes effect on the next request rather than when the token expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from recruitops.api.deps import get_app_settings, get_database
from recruitops.core.config import Settings
from recruitops.db.postgres import Database
from recruitops.services.user_service import ROLE_ADMIN, UserService

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, settings: Settings,
                        expires_delta: Optional[timedelta] = None) -> str:
    expires = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    claims = {"sub": str(user_id), "exp": expires}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Claims of a valid token, None when it is malformed, forged or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
) -> dict:
    """
    FastAPI dependency - the signed-in account.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user["role"]
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_token(credentials.credentials, settings)
    subject = (claims or {}).get("sub")
    if not subject or not str(subject).isdigit():
        raise unauthorized

    account = UserService(database).get(int(subject))
    if account is None:
        raise unauthorized
    if not account["is_active"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account deactivated")

    return {"user_id": account["user_id"], "email": account["email"], "role": account["role"]}


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return user
