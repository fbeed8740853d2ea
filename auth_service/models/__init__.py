# 导入所有模型以确保它们被注册到SQLAlchemy
from auth_service.models.user import User

__all__ = [
    "User",
]
