from http import HTTPStatus

from fastapi import APIRouter, Depends
from auth_service.api.dependencies import get_auth_service
from auth_service.schemas.base import ApiResponse
from auth_service.schemas.email_verification import (ConfirmRegistrationRequest,
                                                      ResendCodeRequest)
from auth_service.schemas.user import (ForgotPasswordRequest, LoginRequest,
                                       RecoverPasswordRequest,
                                       RefreshTokenRequest, RegisterRequest)
from auth_service.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=ApiResponse, status_code=HTTPStatus.CREATED)
async def register(user_data: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """注册新账户并发送确认验证码"""
    result = await auth_service.register(user_data)
    minutes = result["expires_in"] // 60
    return ApiResponse(
        message=("Your account has been registered. Please check your email for a "
                 f"confirmation code. You have {minutes} minutes to confirm your account."),
        data=result
    )


@router.post("/resend-code", response_model=ApiResponse)
async def resend_code(request: ResendCodeRequest, auth_service: AuthService = Depends(get_auth_service)):
    """向未确认账户重新发送确认验证码"""
    result = await auth_service.resend_confirmation(request.email)
    return ApiResponse(message="Confirmation code sent", data=result)


@router.post("/confirm-registration", response_model=ApiResponse)
async def confirm_registration(request: ConfirmRegistrationRequest,
                               auth_service: AuthService = Depends(get_auth_service)):
    """使用邮件验证码确认注册，返回JWT令牌"""
    tokens = await auth_service.confirm_registration(request.email, request.code)
    return ApiResponse(message="Registration confirmed", data=tokens)


@router.post("/login", response_model=ApiResponse)
async def login(user_data: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    tokens = await auth_service.login(user_data)
    return ApiResponse(message="Login successful", data=tokens)


@router.post("/refresh", response_model=ApiResponse)
async def refresh_token(request: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)):
    tokens = await auth_service.refresh_token(request.refresh_token)
    return ApiResponse(message="Token refreshed successfully", data=tokens)


@router.post("/forgot-password", response_model=ApiResponse)
async def forgot_password(request: ForgotPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    """发送找回密码验证码"""
    result = await auth_service.forgot_password(request.email)
    minutes = result["expires_in"] // 60
    return ApiResponse(
        message=f"Confirmation code sent to your email. Please use your code within {minutes} minutes.",
        data=result
    )


@router.post("/recover-password", response_model=ApiResponse)
async def recover_password(request: RecoverPasswordRequest,
                           auth_service: AuthService = Depends(get_auth_service)):
    """使用找回密码验证码设置新密码"""
    await auth_service.recover_password(request)
    return ApiResponse(message="Password successfully updated")
