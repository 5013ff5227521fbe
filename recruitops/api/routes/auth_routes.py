"""
Authentication Routes

POST /auth/register              - Create an account (the first one becomes admin)
POST /auth/login                 - Exchange credentials for a JWT
GET  /auth/me                    - The signed-in account
PUT  /auth/users/{user_id}/role  - Promote or demote an account (admin)
"""

from fastapi import APIRouter, Depends, HTTPException

from recruitops.api.deps import get_app_settings, get_database
from recruitops.core.auth import (
    create_access_token, get_current_admin, get_current_user, hash_password, verify_password,
)
from recruitops.core.config import Settings
from recruitops.core.log import get_logger
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import (
    LoginRequest, MessageResponse, RegisterRequest, RoleUpdate, TokenResponse, UserResponse,
)
from recruitops.services.user_service import ROLE_ADMIN, EmailTakenError, UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest, database: Database = Depends(get_database)):
    """
    Accounts start as viewers; an admin can promote them afterwards.
    """
    try:
        role = UserService(database).create(request.email, hash_password(request.password))
    except EmailTakenError:
        raise HTTPException(status_code=400, detail="Email already registered")
    return MessageResponse(message=f"Registered as {role}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """
    Send the returned token as: Authorization: Bearer <token>
    """
    account = UserService(database).get_by_email(request.email)
    if account is None or not verify_password(request.password, account["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not account["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return TokenResponse(
        access_token=create_access_token(account["user_id"], settings),
        user_id=account["user_id"],
        role=account["role"],
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user), database: Database = Depends(get_database)):
    return UserService(database).get(user["user_id"])


@router.put("/users/{user_id}/role", response_model=MessageResponse)
async def assign_role(
    user_id: int,
    request: RoleUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    role = request.role.value
    if user_id == admin["user_id"] and role != ROLE_ADMIN:
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")
    if not UserService(database).set_role(user_id, role):
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("User %s set to %s by %s", user_id, role, admin["email"])
    return MessageResponse(message=f"User {user_id} is now {role}")
