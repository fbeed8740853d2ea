from fastapi import APIRouter, Depends, Query
from auth_service.api.dependencies import (get_current_admin_user,
                                           get_user_service)
from auth_service.models.user import User
from auth_service.schemas.base import ApiResponse
from auth_service.schemas.user import (AddCourierRequest,
                                       AddProductManagerRequest, LookupField,
                                       UserResponse, UserRole)
from auth_service.services.user_service import UserService

router = APIRouter()


@router.put("/ban/{id}", response_model=ApiResponse)
async def ban_user(
    id: str,
    data: LookupField = Query(..., description="Search with id or email"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    """封禁用户（仅管理员）"""
    user = await user_service.ban_user(id, data)
    return ApiResponse(message="User is banned", data=UserResponse.model_validate(user).model_dump())


@router.put("/unban/{id}", response_model=ApiResponse)
async def unban_user(
    id: str,
    data: LookupField = Query(..., description="Search with id or email"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    """解封用户（仅管理员）"""
    user = await user_service.unban_user(id, data)
    return ApiResponse(message="User is unbanned", data=UserResponse.model_validate(user).model_dump())


@router.put("/change-role/{id}", response_model=ApiResponse)
async def change_role(
    id: str,
    data: LookupField = Query(..., description="Search with id or email"),
    role: UserRole = Query(..., description="New role of the user"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    """修改用户角色（仅管理员）"""
    user = await user_service.change_role(id, data, role)
    return ApiResponse(message="User role updated", data=UserResponse.model_validate(user).model_dump())


@router.post("/add-courier", response_model=ApiResponse)
async def add_courier(
    request: AddCourierRequest,
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    courier = await user_service.add_courier(request)
    return ApiResponse(message="Courier is added", data=UserResponse.model_validate(courier).model_dump())


@router.delete("/delete-courier/{id}", response_model=ApiResponse)
async def delete_courier(
    id: str,
    data: LookupField = Query(..., description="Search with id or email"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    await user_service.delete_courier(id, data)
    return ApiResponse(message="Courier is deleted", data={"id": id})


@router.post("/add-product-manager", response_model=ApiResponse)
async def add_product_manager(
    request: AddProductManagerRequest,
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    manager = await user_service.add_product_manager(request)
    return ApiResponse(message="Product manager is added", data=UserResponse.model_validate(manager).model_dump())


@router.delete("/delete-product-manager/{id}", response_model=ApiResponse)
async def delete_product_manager(
    id: str,
    data: LookupField = Query(..., description="Search with id or email"),
    admin: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
):
    await user_service.delete_product_manager(id, data)
    return ApiResponse(message="Product manager is deleted", data={"id": id})
