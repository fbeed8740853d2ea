import json

import httpx
import pytest
from auth_service.schemas.email_verification import CodePurpose
from auth_service.services.email_service import (ConsoleEmailService,
                                                 EmailService,
                                                 render_verification_email)


@pytest.fixture
def mail_transport(monkeypatch):
    """Route the service's httpx client through a MockTransport"""
    calls = []
    state = {"handler": lambda request: httpx.Response(200, json={"message": "queued", "email_id": "m-1"})}

    def handler(request):
        calls.append(request)
        return state["handler"](request)

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx, "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs))
    return calls, state


def test_templates_differ_by_purpose():
    subject, body = render_verification_email("482913", CodePurpose.register, 180)
    assert "Registration" in subject
    assert "482913" in body
    assert "3 minutes" in body

    subject, body = render_verification_email("482913", CodePurpose.recover, 180)
    assert "Password recovery" in subject


@pytest.mark.asyncio
async def test_send_posts_to_mail_service(mail_transport):
    calls, _ = mail_transport

    result = await EmailService().send_verification_code("a@b.com", "482913", CodePurpose.register)

    assert result == {"success": True, "message": "queued", "email_id": "m-1"}
    assert len(calls) == 1
    assert calls[0].url.path == "/v1/mail/send"
    assert json.loads(calls[0].content)["recipient_email"] == "a@b.com"


@pytest.mark.asyncio
async def test_send_reports_rejection(mail_transport):
    _, state = mail_transport
    state["handler"] = lambda request: httpx.Response(500, text="quota exceeded")

    result = await EmailService().send_verification_code("a@b.com", "482913", CodePurpose.recover)

    assert result["success"] is False
    assert "quota exceeded" in result["message"]


@pytest.mark.asyncio
async def test_send_reports_connection_failure(mail_transport):
    _, state = mail_transport

    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    state["handler"] = refuse

    result = await EmailService().send_verification_code("a@b.com", "482913", CodePurpose.register)

    assert result["success"] is False


@pytest.mark.asyncio
async def test_console_backend_always_succeeds():
    result = await ConsoleEmailService().send_verification_code("a@b.com", "482913", CodePurpose.register)
    assert result["success"] is True
