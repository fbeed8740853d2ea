import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field

SPECIAL_CHARACTERS = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")


class UserRole(str, Enum):
    user = "user"
    admin = "admin"
    courier = "courier"
    manager = "manager"
    banned = "banned"


class LookupField(str, Enum):
    """路径参数按哪个字段查找用户"""
    id = "id"
    email = "email"


def check_password_strength(password: str) -> str:
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not SPECIAL_CHARACTERS.search(password):
        raise ValueError("Password must contain at least one special character")
    return password


StrongPassword = Annotated[str, AfterValidator(check_password_strength)]


class RegisterRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")
    password: StrongPassword = Field(..., description="Password (8+ chars, digit, uppercase, special)")


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")


class RecoverPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")
    code: str = Field(..., min_length=1, max_length=6, description="Verification code")
    new_password: StrongPassword = Field(..., alias="newPassword", description="New password")

    class Config:
        populate_by_name = True


class AddCourierRequest(BaseModel):
    email: EmailStr = Field(..., description="Courier email address")
    password: StrongPassword = Field(..., description="Courier password")


class AddProductManagerRequest(BaseModel):
    email: EmailStr = Field(..., description="Product manager email address")
    password: StrongPassword = Field(..., description="Product manager password")


class UserResponse(BaseModel):
    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(..., description="User role")
    is_confirmed: bool = Field(..., description="Whether the email is confirmed")
    confirmed_at: Optional[datetime] = Field(None, description="Confirmation time")
    created_at: Optional[datetime] = Field(None, description="Creation time")

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="Access token")
    refresh_token: str = Field(..., description="Refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
