from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scored.database import get_db
from scored.dependencies import get_current_user
from scored.models.user import User
from scored.schemas.auth import (
    EmailResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateUsernameRequest,
    UpdateUsernameResponse,
    UsernameLookupRequest,
    UserProfileResponse,
)
from scored.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a new account with email and password."""
    user = await auth_service.register_user(
        db=db,
        email=request.email,
        password=request.password,
        name=request.name,
        username=request.username,
    )
    return TokenResponse(**auth_service.issue_access_token(user.id))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Sign in with email or username and password."""
    user = await auth_service.login(db, request.login, request.password)
    return TokenResponse(**auth_service.issue_access_token(user.id))


@router.post("/email-by-username", response_model=EmailResponse)
async def email_by_username(
    request: UsernameLookupRequest, db: AsyncSession = Depends(get_db)
):
    """Resolve a username to its sign-in email. No session required."""
    email = await auth_service.get_email_by_username(db, request.username)
    return {"email": email}


@router.post("/update-username", response_model=UpdateUsernameResponse)
async def update_username(
    request: UpdateUsernameRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    username = await auth_service.update_username(db, user.id, request.new_username)
    return {"success": True, "username": username}


@router.get("/user-profile", response_model=UserProfileResponse)
async def user_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return the signed-in user's profile as currently stored."""
    return await auth_service.get_profile(db, user.id)
