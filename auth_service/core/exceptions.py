class AppException(Exception):
    """应用异常基类"""

    def __init__(self, message: str, code: str = "APP_ERROR", status_code: int = 400):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(AppException):
    """认证异常"""

    def __init__(self, message: str = "认证异常"):
        super().__init__(message, "AUTH_ERROR", 401)


class AuthorizationError(AppException):
    """授权异常"""

    def __init__(self, message: str = "授权异常"):
        super().__init__(message, "PERMISSION_DENIED", 403)


class NotFoundError(AppException):
    """资源未找到异常"""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "NOT_FOUND", 404)


class ValidationError(AppException):
    """验证异常"""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, "VALIDATION_ERROR", 422)


class DatabaseError(AppException):
    """数据库异常"""

    def __init__(self, message: str = "Database error"):
        super().__init__(message, "DATABASE_ERROR", 500)


# 验证码异常


class RandomnessError(AppException):
    """系统随机源不可用，未生成验证码"""

    def __init__(self, message: str = "Could not generate verification code"):
        super().__init__(message, "RANDOMNESS_FAILURE", 500)


class StoreUnavailableError(AppException):
    """验证码存储不可用，需重试整个请求"""

    def __init__(self, message: str = "Verification store unavailable"):
        super().__init__(message, "STORE_UNAVAILABLE", 503)


class CodeExpiredError(AppException):
    """验证码不存在：已过期、已使用或从未申请"""

    def __init__(self, message: str = "Verification code expired or email not found"):
        super().__init__(message, "CODE_EXPIRED", 404)


class IncorrectCodeError(AppException):
    """验证码错误"""

    def __init__(self, message: str = "Incorrect verification code"):
        super().__init__(message, "INCORRECT_CODE", 401)


class TooManyAttemptsError(AppException):
    """尝试次数过多，验证码已失效"""

    def __init__(self, message: str = "Too many incorrect attempts, please request a new code"):
        super().__init__(message, "TOO_MANY_ATTEMPTS", 429)


class EmailDeliveryError(AppException):
    """验证码邮件发送失败"""

    def __init__(self, message: str = "Failed to send verification email"):
        super().__init__(message, "EMAIL_DELIVERY_FAILED", 502)
