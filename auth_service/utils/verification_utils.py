"""验证码工具：生成、规范化和键名"""
import secrets

from auth_service.core.exceptions import RandomnessError
from auth_service.schemas.email_verification import CodePurpose

CODE_LENGTH = 6
CODE_SPACE = 10 ** CODE_LENGTH
KEY_PREFIX = "verification_code"


def generate_verification_code() -> str:
    """使用系统安全随机数生成6位验证码，不足补零"""
    try:
        value = secrets.randbelow(CODE_SPACE)
    except (OSError, NotImplementedError) as e:
        raise RandomnessError(f"Randomness source failed: {e}") from e
    return str(value).zfill(CODE_LENGTH)


def normalize_code(code: str) -> str:
    """去除空白并补回用户省略的前导零"""
    code = (code or "").strip()
    if code.isdigit() and len(code) < CODE_LENGTH:
        return code.zfill(CODE_LENGTH)
    return code


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_code_key(email: str, purpose: CodePurpose) -> str:
    """获取 (用途, 邮箱) 对应的验证码Redis键"""
    return f"{KEY_PREFIX}:{purpose.value}:{normalize_email(email)}"
