import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from auth_service.config import settings
from auth_service.core.code_store import VerificationOutcome
from auth_service.core.exceptions import (CodeExpiredError, EmailDeliveryError,
                                          IncorrectCodeError,
                                          TooManyAttemptsError)
from auth_service.schemas.email_verification import (CodePurpose,
                                                     VerificationCode)
from auth_service.utils.logger import verification_logger as logger
from auth_service.utils.verification_utils import (generate_verification_code,
                                                   get_code_key,
                                                   normalize_code,
                                                   normalize_email)


class VerificationCodeManager:
    """邮箱验证码的签发、校验和作废

    自身不保存状态，验证码存放在注入的存储中，按 (用途, 邮箱) 区分。
    同一键重新签发会覆盖旧验证码并重新计算有效期。
    """

    def __init__(
        self,
        store,
        email_service,
        code_ttl_seconds: int = settings.verification_code_ttl_seconds,
        max_attempts: int = settings.verification_max_attempts,
        generate_code: Callable[[], str] = generate_verification_code,
    ):
        self.store = store
        self.email_service = email_service
        self.code_ttl_seconds = code_ttl_seconds
        self.max_attempts = max_attempts
        self.generate_code = generate_code

    async def issue_code(self, email: str, purpose: CodePurpose) -> VerificationCode:
        """保存新验证码并发送邮件

        发送失败时删除已保存的验证码，不留下用户收不到的有效验证码
        """
        email = normalize_email(email)
        code = self.generate_code()
        key = get_code_key(email, purpose)

        await asyncio.to_thread(self.store.set, key, code, self.code_ttl_seconds)

        result = await self.email_service.send_verification_code(
            email, code, purpose, self.code_ttl_seconds)
        if not result["success"]:
            await asyncio.to_thread(self.store.delete, key)
            logger.warning(f"{purpose.value} code for {email} withdrawn: delivery failed")
            raise EmailDeliveryError(f"Failed to send verification code: {result['message']}")

        logger.info(f"{purpose.value} code issued for {email}")
        return VerificationCode(
            purpose=purpose,
            subject_email=email,
            code=code,
            issued_at=datetime.now(timezone.utc),
            ttl=timedelta(seconds=self.code_ttl_seconds),
        )

    def verify_code(self, email: str, code: str, purpose: CodePurpose) -> bool:
        """校验并消费验证码，任何失败都抛出异常"""
        email = normalize_email(email)
        key = get_code_key(email, purpose)
        outcome = self.store.consume(key, normalize_code(code), self.max_attempts)

        if outcome == VerificationOutcome.missing:
            raise CodeExpiredError()
        if outcome == VerificationOutcome.locked:
            logger.warning(f"{purpose.value} code for {email} locked after {self.max_attempts} attempts")
            raise TooManyAttemptsError()
        if outcome == VerificationOutcome.mismatch:
            raise IncorrectCodeError()

        logger.info(f"{purpose.value} code verified for {email}")
        return True

    def get_status(self, email: str, purpose: CodePurpose) -> Optional[Dict[str, Any]]:
        """获取验证码的尝试次数和剩余有效期（不返回验证码本身）"""
        email = normalize_email(email)
        key = get_code_key(email, purpose)
        data = self.store.get(key)
        if data is None:
            return None
        return {
            "email": email,
            "purpose": purpose,
            "attempts": data["attempts"],
            "ttl": self.store.ttl(key),
        }
