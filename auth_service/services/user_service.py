from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session
from auth_service.core.auth import get_password_hash
from auth_service.core.exceptions import NotFoundError, ValidationError
from auth_service.models.user import User
from auth_service.schemas.user import (AddCourierRequest,
                                       AddProductManagerRequest, LookupField,
                                       UserRole)
from auth_service.utils.logger import app_logger
from auth_service.utils.verification_utils import normalize_email


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, identifier: str, field: LookupField, role: Optional[UserRole] = None):
        query = self.db.query(User)
        if field == LookupField.email:
            query = query.filter(User.email == normalize_email(identifier))
        else:
            query = query.filter(User.id == identifier)
        if role is not None:
            query = query.filter(User.role == role)
        return query.first()

    async def get_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def ban_user(self, identifier: str, field: LookupField) -> User:
        """封禁普通用户，其他角色不受影响"""
        user = self._find(identifier, field, role=UserRole.user)
        if not user:
            raise NotFoundError("No user with role 'user' found")
        setattr(user, "role", UserRole.banned)
        self.db.commit()
        app_logger.info(f"User banned: {user.email}")
        return user

    async def unban_user(self, identifier: str, field: LookupField) -> User:
        user = self._find(identifier, field, role=UserRole.banned)
        if not user:
            raise NotFoundError("No banned user found")
        setattr(user, "role", UserRole.user)
        self.db.commit()
        app_logger.info(f"User unbanned: {user.email}")
        return user

    async def change_role(self, identifier: str, field: LookupField, role: UserRole) -> User:
        user = self._find(identifier, field)
        if not user:
            raise NotFoundError("User not found")
        setattr(user, "role", role)
        self.db.commit()
        app_logger.info(f"Role of {user.email} changed to {role.value}")
        return user

    def _add_staff(self, email: str, password: str, role: UserRole) -> User:
        email = normalize_email(email)
        if self.db.query(User).filter(User.email == email).first():
            raise ValidationError(f"Email already registered: {email}")

        staff = User(
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_confirmed=True,
            confirmed_at=datetime.now(timezone.utc),
        )
        self.db.add(staff)
        self.db.commit()
        self.db.refresh(staff)
        app_logger.info(f"{role.value} added: {email}")
        return staff

    def _delete_staff(self, identifier: str, field: LookupField, role: UserRole) -> None:
        staff = self._find(identifier, field, role=role)
        if not staff:
            raise NotFoundError(f"No user with role '{role.value}' found")
        email = staff.email
        self.db.delete(staff)
        self.db.commit()
        app_logger.info(f"{role.value} deleted: {email}")

    async def add_courier(self, request: AddCourierRequest) -> User:
        """快递员由管理员创建，无需邮箱确认"""
        return self._add_staff(request.email, request.password, UserRole.courier)

    async def delete_courier(self, identifier: str, field: LookupField) -> None:
        self._delete_staff(identifier, field, UserRole.courier)

    async def add_product_manager(self, request: AddProductManagerRequest) -> User:
        """产品经理由管理员创建，无需邮箱确认"""
        return self._add_staff(request.email, request.password, UserRole.manager)

    async def delete_product_manager(self, identifier: str, field: LookupField) -> None:
        self._delete_staff(identifier, field, UserRole.manager)
