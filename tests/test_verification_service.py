import threading

import pytest
from auth_service.core.exceptions import (CodeExpiredError, EmailDeliveryError,
                                          IncorrectCodeError,
                                          StoreUnavailableError,
                                          TooManyAttemptsError)
from auth_service.schemas.email_verification import CodePurpose
from auth_service.services.verification_service import VerificationCodeManager


@pytest.fixture
def manager(code_store, email_service):
    return VerificationCodeManager(code_store, email_service,
                                   code_ttl_seconds=180, max_attempts=5)


def wrong(code: str) -> str:
    return str((int(code) + 1) % 1000000).zfill(6)


@pytest.mark.asyncio
async def test_correct_code_verifies_exactly_once(manager, email_service):
    issued = await manager.issue_code("a@b.com", CodePurpose.register)
    assert email_service.last_code("a@b.com") == issued.code
    assert len(issued.code) == 6 and issued.code.isdigit()

    assert manager.verify_code("a@b.com", issued.code, CodePurpose.register) is True
    with pytest.raises(CodeExpiredError):
        manager.verify_code("a@b.com", issued.code, CodePurpose.register)


@pytest.mark.asyncio
async def test_incorrect_code_leaves_pending_code_valid(manager):
    issued = await manager.issue_code("a@b.com", CodePurpose.register)

    with pytest.raises(IncorrectCodeError):
        manager.verify_code("a@b.com", wrong(issued.code), CodePurpose.register)

    assert manager.get_status("a@b.com", CodePurpose.register)["attempts"] == 1
    assert manager.verify_code("a@b.com", issued.code, CodePurpose.register) is True


@pytest.mark.asyncio
async def test_reissue_invalidates_previous_code(code_store, email_service):
    codes = iter(["111111", "222222"])
    manager = VerificationCodeManager(code_store, email_service,
                                      generate_code=lambda: next(codes))
    first = await manager.issue_code("a@b.com", CodePurpose.register)
    second = await manager.issue_code("a@b.com", CodePurpose.register)
    assert (first.code, second.code) == ("111111", "222222")

    with pytest.raises(IncorrectCodeError):
        manager.verify_code("a@b.com", first.code, CodePurpose.register)
    assert manager.verify_code("a@b.com", second.code, CodePurpose.register) is True


@pytest.mark.asyncio
async def test_code_expires_after_ttl(manager, code_store):
    issued = await manager.issue_code("a@b.com", CodePurpose.register)
    code_store.advance(181)

    with pytest.raises(CodeExpiredError):
        manager.verify_code("a@b.com", issued.code, CodePurpose.register)


@pytest.mark.asyncio
async def test_code_still_valid_just_before_ttl(manager, code_store):
    issued = await manager.issue_code("a@b.com", CodePurpose.recover)
    code_store.advance(179)

    assert manager.verify_code("a@b.com", issued.code, CodePurpose.recover) is True


@pytest.mark.asyncio
async def test_attempt_limit_invalidates_code(manager):
    issued = await manager.issue_code("a@b.com", CodePurpose.register)
    bad = wrong(issued.code)

    for _ in range(4):
        with pytest.raises(IncorrectCodeError):
            manager.verify_code("a@b.com", bad, CodePurpose.register)
    with pytest.raises(TooManyAttemptsError):
        manager.verify_code("a@b.com", bad, CodePurpose.register)

    with pytest.raises(CodeExpiredError):
        manager.verify_code("a@b.com", issued.code, CodePurpose.register)


@pytest.mark.asyncio
async def test_delivery_failure_withdraws_code(manager, email_service, code_store):
    email_service.fail = True

    with pytest.raises(EmailDeliveryError):
        await manager.issue_code("a@b.com", CodePurpose.register)

    assert code_store.entries == {}
    assert manager.get_status("a@b.com", CodePurpose.register) is None


@pytest.mark.asyncio
async def test_purposes_do_not_invalidate_each_other(manager):
    register = await manager.issue_code("a@b.com", CodePurpose.register)
    recover = await manager.issue_code("a@b.com", CodePurpose.recover)

    assert manager.verify_code("a@b.com", recover.code, CodePurpose.recover) is True
    assert manager.verify_code("a@b.com", register.code, CodePurpose.register) is True


@pytest.mark.asyncio
async def test_email_key_is_case_insensitive(manager):
    issued = await manager.issue_code("A@B.com", CodePurpose.register)
    assert manager.verify_code(" a@b.COM ", issued.code, CodePurpose.register) is True


@pytest.mark.asyncio
async def test_code_without_leading_zero_is_accepted(code_store, email_service):
    manager = VerificationCodeManager(code_store, email_service,
                                      generate_code=lambda: "012345")
    await manager.issue_code("a@b.com", CodePurpose.register)

    assert manager.verify_code("a@b.com", "12345", CodePurpose.register) is True


@pytest.mark.asyncio
async def test_get_status_hides_code(manager, code_store):
    await manager.issue_code("a@b.com", CodePurpose.register)
    code_store.advance(60)

    status = manager.get_status("a@b.com", CodePurpose.register)
    assert "code" not in status
    assert status["ttl"] == 120
    assert status["attempts"] == 0


def test_store_failure_is_not_reported_as_expired(email_service):
    class BrokenStore:
        def consume(self, key, code, max_attempts):
            raise StoreUnavailableError()

    manager = VerificationCodeManager(BrokenStore(), email_service)
    with pytest.raises(StoreUnavailableError):
        manager.verify_code("a@b.com", "123456", CodePurpose.register)


@pytest.mark.asyncio
async def test_issue_code_runs_store_calls_off_the_event_loop(code_store, email_service):
    threads = []

    class ThreadRecordingStore:
        def set(self, key, code, ttl_seconds):
            threads.append(threading.get_ident())
            code_store.set(key, code, ttl_seconds)

        def delete(self, key):
            threads.append(threading.get_ident())
            code_store.delete(key)

    manager = VerificationCodeManager(ThreadRecordingStore(), email_service)
    email_service.fail = True
    with pytest.raises(EmailDeliveryError):
        await manager.issue_code("a@b.com", CodePurpose.register)

    assert len(threads) == 2
    assert threading.get_ident() not in threads
    assert code_store.get("verification_code:register:a@b.com") is None
