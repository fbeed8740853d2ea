from fastapi import APIRouter
from auth_service.api.v1.endpoints import admin, auth, users

api_router = APIRouter()

# 注册、登录和找回密码
api_router.include_router(
    auth.router, prefix="/auth", tags=["auth"])

# 用户信息
api_router.include_router(
    users.router, prefix="/users", tags=["users"])

# 管理面板
api_router.include_router(
    admin.router, prefix="/admin", tags=["admin-panel"])
