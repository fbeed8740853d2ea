from fastapi import Depends, Request
from fastapi.security import HTTPBearer
from sqlalchemy.orm import Session
from auth_service.config import settings
from auth_service.core.auth import verify_token
from auth_service.core.code_store import RedisCodeStore
from auth_service.core.database import get_db
from auth_service.core.exceptions import (AuthenticationError,
                                          AuthorizationError)
from auth_service.models.user import User
from auth_service.schemas.user import UserRole
from auth_service.services.auth_service import AuthService
from auth_service.services.email_service import build_email_service
from auth_service.services.user_service import UserService
from auth_service.services.verification_service import VerificationCodeManager

security = HTTPBearer()


def get_code_store(request: Request) -> RedisCodeStore:
    """启动时创建、进程内共享的验证码存储"""
    return request.app.state.code_store


def get_email_service():
    return build_email_service()


def get_verification_manager(
    store: RedisCodeStore = Depends(get_code_store),
    email_service=Depends(get_email_service),
) -> VerificationCodeManager:
    return VerificationCodeManager(
        store,
        email_service,
        code_ttl_seconds=settings.verification_code_ttl_seconds,
        max_attempts=settings.verification_max_attempts,
    )


def get_auth_service(
    db: Session = Depends(get_db),
    verification_manager: VerificationCodeManager = Depends(get_verification_manager),
) -> AuthService:
    return AuthService(db, verification_manager)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_current_user(
    token=Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """根据 Bearer 令牌获取已确认且未封禁的账户"""
    payload = verify_token(token.credentials)
    if not payload:
        raise AuthenticationError("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("User not found")
    if user.role == UserRole.banned:
        raise AuthorizationError("User account is banned")

    return user


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.role != UserRole.admin:
        raise AuthorizationError("Admin access required")
    return current_user
