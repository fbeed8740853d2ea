import asyncio
from datetime import datetime, timezone

from sqlalchemy.orm import Session
from auth_service.core.auth import (create_token_pair, get_password_hash,
                                    verify_password, verify_token)
from auth_service.core.exceptions import (AuthenticationError,
                                          AuthorizationError, NotFoundError,
                                          ValidationError)
from auth_service.models.user import User
from auth_service.schemas.email_verification import CodePurpose
from auth_service.schemas.user import (LoginRequest, RecoverPasswordRequest,
                                       RegisterRequest, UserRole)
from auth_service.services.verification_service import VerificationCodeManager
from auth_service.utils.logger import app_logger
from auth_service.utils.verification_utils import normalize_email


class AuthService:
    def __init__(self, db: Session, verification_manager: VerificationCodeManager):
        self.db = db
        self.verification_manager = verification_manager

    def _get_user_by_email(self, email: str):
        return self.db.query(User).filter(
            User.email == normalize_email(email)).first()

    def _tokens_for(self, user: User) -> dict:
        role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
        return create_token_pair(str(user.id), str(user.email), role)

    async def register(self, user_data: RegisterRequest) -> dict:
        """创建未确认账户并发送确认验证码"""
        email = normalize_email(user_data.email)
        if self._get_user_by_email(email):
            raise ValidationError(f"Email already registered: {email}")

        db_user = User(
            email=email,
            hashed_password=get_password_hash(user_data.password),
            role=UserRole.user,
            is_confirmed=False,
        )
        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)
        app_logger.info(f"Account registered: {email}")

        issued = await self.verification_manager.issue_code(email, CodePurpose.register)
        return {
            "email": email,
            "expires_in": int(issued.ttl.total_seconds())
        }

    async def resend_confirmation(self, email: str) -> dict:
        """为未确认账户重新发送确认验证码"""
        user = self._get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        if bool(user.is_confirmed):
            raise ValidationError("Account is already confirmed")

        issued = await self.verification_manager.issue_code(str(user.email), CodePurpose.register)
        return {
            "email": issued.subject_email,
            "expires_in": int(issued.ttl.total_seconds())
        }

    async def confirm_registration(self, email: str, code: str) -> dict:
        """校验确认验证码，确认账户后签发令牌"""
        await asyncio.to_thread(
            self.verification_manager.verify_code, email, code, CodePurpose.register)

        user = self._get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        setattr(user, "is_confirmed", True)
        setattr(user, "confirmed_at", datetime.now(timezone.utc))
        self.db.commit()
        self.db.refresh(user)
        app_logger.info(f"Account confirmed: {user.email}")

        return self._tokens_for(user)

    async def login(self, user_data: LoginRequest) -> dict:
        user = self._get_user_by_email(user_data.email)
        if not user or not verify_password(user_data.password, str(user.hashed_password)):
            raise AuthenticationError("Invalid email or password")

        if not bool(user.is_confirmed):
            raise AuthenticationError(
                "Your account is not verified. Please check your email for a confirmation code.")

        if user.role == UserRole.banned:
            raise AuthorizationError("User account is banned")

        return self._tokens_for(user)

    async def refresh_token(self, token: str) -> dict:
        payload = verify_token(token, token_type="refresh")
        if not payload:
            raise AuthenticationError("Invalid refresh token")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token payload")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise AuthenticationError("User not found")
        if user.role == UserRole.banned:
            raise AuthorizationError("User account is banned")

        return self._tokens_for(user)

    async def forgot_password(self, email: str) -> dict:
        """向已有账户发送找回密码验证码"""
        user = self._get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        issued = await self.verification_manager.issue_code(str(user.email), CodePurpose.recover)
        return {
            "email": issued.subject_email,
            "expires_in": int(issued.ttl.total_seconds())
        }

    async def recover_password(self, request: RecoverPasswordRequest) -> None:
        """校验找回密码验证码并保存新密码"""
        await asyncio.to_thread(
            self.verification_manager.verify_code,
            request.email, request.code, CodePurpose.recover)

        user = self._get_user_by_email(request.email)
        if not user:
            raise NotFoundError("User not found")

        setattr(user, "hashed_password", get_password_hash(request.new_password))
        self.db.commit()
        app_logger.info(f"Password recovered: {user.email}")
