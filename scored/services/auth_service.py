import logging
import re
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scored.config import settings
from scored.exceptions import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidUsernameError,
    UsernameTakenError,
    UserNotFoundError,
)
from scored.models.user import User

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,20}$")

# Longest input bcrypt accepts
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def issue_access_token(user_id: str | uuid.UUID) -> dict:
    """Issue a signed session token for the user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    access_token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


def decode_access_token(token: str) -> uuid.UUID:
    """Verify a session token and return the user id it was issued for."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("type") != "access":
        raise ValueError("Invalid token type")

    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise ValueError("Invalid token subject")


def validate_username(username: str) -> str:
    """Trim and check a username against the allowed pattern."""
    trimmed = username.strip()
    if not USERNAME_PATTERN.match(trimmed):
        raise InvalidUsernameError()
    return trimmed


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: str | None = None,
    username: str | None = None,
) -> User:
    """Register a new user with email/password."""
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise EmailTakenError()

    if username is not None:
        username = validate_username(username)
        taken = await db.execute(select(User.id).where(User.username == username))
        if taken.scalar_one_or_none() is not None:
            raise UsernameTakenError()

    user = User(
        id=uuid.uuid4(),
        email=email,
        name=name or email.split("@")[0],
        username=username,
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


async def login(db: AsyncSession, identifier: str, password: str) -> User:
    """Authenticate with email or username plus password."""
    result = await db.execute(
        select(User).where(or_(User.email == identifier, User.username == identifier))
    )
    user = result.scalars().first()

    if user is None or user.password_hash is None:
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return user


async def get_email_by_username(db: AsyncSession, username: str) -> str:
    result = await db.execute(select(User.email).where(User.username == username))
    email = result.scalar_one_or_none()
    if email is None:
        raise UserNotFoundError("Username not found")
    return email


async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


async def update_username(db: AsyncSession, user_id: uuid.UUID, new_username: str) -> str:
    """Change a user's username. The unique index settles concurrent claims."""
    username = validate_username(new_username)

    existing = await db.execute(
        select(User.id).where(User.username == username, User.id != user_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise UsernameTakenError()

    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()

    user.username = username
    user.updated_at = datetime.now(timezone.utc)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise UsernameTakenError()

    logger.info("User %s changed username to %s", user_id, username)
    return username
