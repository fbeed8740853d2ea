from fastapi import APIRouter, Depends
from auth_service.api.dependencies import get_current_user, get_user_service
from auth_service.models.user import User
from auth_service.schemas.user import UserResponse
from auth_service.services.user_service import UserService

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return UserResponse.model_validate(current_user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.get_user(user_id)
    return UserResponse.model_validate(user)
