from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, EmailStr, Field


class CodePurpose(str, Enum):
    register = "register"
    recover = "recover"


@dataclass(frozen=True)
class VerificationCode:
    """已签发的验证码，只存在于过期存储和内存中"""
    purpose: CodePurpose
    subject_email: str
    code: str
    issued_at: datetime
    ttl: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + self.ttl


class ResendCodeRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")


class ConfirmRegistrationRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")
    code: str = Field(..., min_length=1, max_length=6,
                      description="Verification code from the email")
