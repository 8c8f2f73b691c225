import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

from scored.services.auth_service import MAX_PASSWORD_BYTES


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=MAX_PASSWORD_BYTES)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # max_length counts characters; multi-byte characters can still overflow
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    login: str = Field(min_length=1, description="Email address or username")
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UsernameLookupRequest(BaseModel):
    username: str = Field(min_length=1)


class EmailResponse(BaseModel):
    email: str


class UpdateUsernameRequest(BaseModel):
    new_username: str = Field(alias="newUsername", min_length=1)


class UpdateUsernameResponse(BaseModel):
    success: bool = True
    username: str


class UserProfileResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    username: str | None

    model_config = {"from_attributes": True}
