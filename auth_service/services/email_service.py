import httpx
from auth_service.config import settings
from auth_service.schemas.email_verification import CodePurpose
from auth_service.utils.logger import get_logger

logger = get_logger("email")

_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
        body {{ font-family: Arial, sans-serif; background-color: #f5f5f5; }}
        .container {{ max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 20px; border-radius: 8px; }}
        .code-box {{ background-color: #f0f0f0; border-left: 4px solid {accent}; padding: 15px; margin: 20px 0; font-size: 24px; font-weight: bold; text-align: center; color: {accent}; }}
        .footer {{ text-align: center; color: #999; font-size: 12px; margin-top: 30px; }}
    </style>
</head>
<body>
    <div class="container">
        <h2>{title}</h2>
        <p>Hello!</p>
        <p>{intro}</p>
        <div class="code-box">{code}</div>
        <p>This code expires in <strong>{minutes} minutes</strong>.</p>
        <p>{outro}</p>
        <div class="footer"><p>&copy; {app_name}</p></div>
    </div>
</body>
</html>
"""


def render_verification_email(code: str, purpose: CodePurpose, ttl_seconds: int) -> tuple:
    """生成验证码邮件的 (主题, HTML 正文)"""
    minutes = max(ttl_seconds // 60, 1)
    if purpose == CodePurpose.register:
        subject = f"{settings.app_name} - Registration confirmation code"
        title = "Confirm your registration"
        intro = "Thanks for signing up. Use the code below to confirm your account:"
        outro = "If you did not create an account, ignore this email."
        accent = "#007bff"
    else:
        subject = f"{settings.app_name} - Password recovery code"
        title = "Password recovery"
        intro = "You asked to reset your password. Use the code below to set a new one:"
        outro = "If this was not you, contact us right away."
        accent = "#ff6b6b"

    body = _TEMPLATE.format(
        accent=accent, title=title, intro=intro, outro=outro, code=code,
        minutes=minutes, app_name=settings.app_name
    ).strip()
    return subject, body


class EmailService:
    """通过 HTTP 邮件服务发送邮件"""

    def __init__(self):
        self.smtp_service_url = settings.smtp_service_url
        self.api_key = settings.smtp_api_key
        self.sender_email = settings.sender_email
        self.timeout = settings.email_timeout_seconds

    async def send_verification_code(self, email: str, code: str, purpose: CodePurpose,
                                     ttl_seconds: int = settings.verification_code_ttl_seconds) -> dict:
        """发送验证码邮件，不抛异常，结果中的 success 表示是否发送成功"""
        subject, body = render_verification_email(code, purpose, ttl_seconds)

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    f"{self.smtp_service_url}/v1/mail/send",
                    headers={
                        "Content-Type": "application/json",
                        "X-API-Key": self.api_key
                    },
                    json={
                        "sender_email": self.sender_email,
                        "recipient_email": email,
                        "subject": subject,
                        "body": body,
                        "body_type": "html"
                    },
                    timeout=self.timeout
                )
            except httpx.HTTPError as e:
                logger.error(f"Mail service unreachable for {email}: {e}")
                return {
                    "success": False,
                    "message": f"Mail service connection failed: {e}"
                }

        if response.status_code == 200:
            result = response.json()
            return {
                "success": True,
                "message": result.get("message", "Email sent"),
                "email_id": result.get("email_id")
            }

        logger.warning(
            f"Mail service rejected message to {email}: {response.status_code}")
        return {
            "success": False,
            "message": f"Email sending failed: {response.text}"
        }


class ConsoleEmailService:
    """开发用发送方式：验证码只写入日志，不实际发信"""

    async def send_verification_code(self, email: str, code: str, purpose: CodePurpose,
                                     ttl_seconds: int = settings.verification_code_ttl_seconds) -> dict:
        logger.info(f"[VERIFICATION] {purpose.value} code for {email}: {code}")
        return {"success": True, "message": "Email written to log"}


def build_email_service():
    """根据 EMAIL_BACKEND 选择发送方式"""
    if settings.email_backend == "console":
        return ConsoleEmailService()
    return EmailService()
