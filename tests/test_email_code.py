from unittest import mock

import pytest

import email_code
from email_code import EmailCodeService
from errors import DeliveryError, RateLimitedError, StoreError, ValidationError
from notify import AppContext

RECIPIENT = "user@example.com"
KEY = f"emailcode:{RECIPIENT}"


@pytest.fixture
def service(store, sender):
    return EmailCodeService(store, sender)


@pytest.fixture
def fixed_code(monkeypatch):
    monkeypatch.setattr(email_code, 'random_digits', lambda length: "123456")
    return "123456"


def test_issue_stores_and_sends_code(service, store, sender):
    context = AppContext(name="Console")
    service.issue(RECIPIENT, context)

    code = store.get(KEY)
    assert code is not None and len(code) == 6 and code.isdigit()
    assert store.ttl(KEY) == 600
    assert sender.sent == [(RECIPIENT, code, context)]


def test_wrong_code_keeps_record(service, store, fixed_code):
    service.issue(RECIPIENT)

    assert not service.validate(RECIPIENT, "000000")
    assert store.get(KEY) == fixed_code
    assert service.validate(RECIPIENT, fixed_code)
    assert store.get(KEY) is None
    assert not service.validate(RECIPIENT, fixed_code)


def test_code_comparison_is_exact(service, fixed_code):
    service.issue(RECIPIENT)
    assert not service.validate(RECIPIENT, " 123456")
    assert not service.validate(RECIPIENT, "12345")
    assert service.validate(RECIPIENT, "123456")


def test_resend_rejected_during_cooldown(service, clock, sender):
    service.issue(RECIPIENT)

    clock.advance(30)
    with pytest.raises(RateLimitedError) as excinfo:
        service.issue(RECIPIENT)
    assert excinfo.value.retry_after == 30
    assert "30 seconds" in str(excinfo.value)
    assert len(sender.sent) == 1


def test_resend_allowed_once_cooldown_elapsed(service, store, clock, sender):
    service.issue(RECIPIENT)

    clock.advance(60)
    service.issue(RECIPIENT)
    assert len(sender.sent) == 2
    assert store.ttl(KEY) == 600
    assert store.get(KEY) == sender.sent[-1][1]


def test_resend_allowed_late_in_lifetime(service, clock, sender):
    service.issue(RECIPIENT)

    clock.advance(540)
    service.issue(RECIPIENT)
    assert len(sender.sent) == 2


def test_resend_replaces_previous_code(service, clock, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(email_code, 'random_digits', lambda length: next(codes))
    service.issue(RECIPIENT)
    clock.advance(120)
    service.issue(RECIPIENT)

    assert not service.validate(RECIPIENT, "111111")
    assert service.validate(RECIPIENT, "222222")


def test_code_expires(service, clock, fixed_code):
    service.issue(RECIPIENT)

    clock.advance(600)
    assert not service.validate(RECIPIENT, fixed_code)


def test_issue_after_expiry_is_not_rate_limited(service, clock, sender):
    service.issue(RECIPIENT)
    clock.advance(601)
    service.issue(RECIPIENT)
    assert len(sender.sent) == 2


def test_recipient_is_normalized(service, sender, fixed_code):
    service.issue("  User@Example.COM ")

    assert sender.sent[0][0] == RECIPIENT
    assert service.validate("USER@example.com", fixed_code)


@pytest.mark.parametrize("recipient", ["", None, "   "])
def test_issue_requires_recipient(recipient):
    store = mock.Mock()
    sender = mock.Mock()
    service = EmailCodeService(store, sender)

    with pytest.raises(ValidationError):
        service.issue(recipient)
    assert store.method_calls == []
    sender.send.assert_not_called()


def test_issue_rejects_malformed_address(service, store, sender):
    with pytest.raises(ValidationError):
        service.issue("not-an-address")
    assert len(store) == 0
    assert sender.sent == []


@pytest.mark.parametrize("recipient, code", [
    ("", "123456"),
    ("a@b.com", ""),
    (None, "123456"),
    ("a@b.com", None),
])
def test_empty_input_skips_store(recipient, code):
    store = mock.Mock()
    service = EmailCodeService(store, mock.Mock())
    assert service.validate(recipient, code) is False
    assert store.method_calls == []


def test_delivery_failure_propagates(store, fixed_code):
    sender = mock.Mock()
    sender.send.side_effect = DeliveryError("smtp down")
    service = EmailCodeService(store, sender)

    with pytest.raises(DeliveryError):
        service.issue(RECIPIENT)
    assert sender.send.call_count == 1
    assert store.get(KEY) == fixed_code


def test_custom_lengths_and_windows(store, sender, clock):
    service = EmailCodeService(store, sender, length=4, expire=120, resend_wait=30)
    service.issue(RECIPIENT)
    assert len(sender.sent[0][1]) == 4

    clock.advance(29)
    with pytest.raises(RateLimitedError) as excinfo:
        service.issue(RECIPIENT)
    assert excinfo.value.retry_after == 1

    clock.advance(1)
    service.issue(RECIPIENT)


def test_resend_wait_longer_than_expiry_is_rejected(store, sender):
    with pytest.raises(ValueError):
        EmailCodeService(store, sender, expire=30, resend_wait=60)


def test_send_receives_stored_lifetime(store, sender):
    service = EmailCodeService(store, sender, expire=120, resend_wait=30)
    service.issue(RECIPIENT)
    assert sender.expires == [120]


def failing_store(**methods):
    store = mock.Mock()
    store.get.return_value = None
    for name in methods:
        getattr(store, name).side_effect = StoreError(f"{name} failed")
    return store


@pytest.mark.parametrize("method", ["get", "set"])
def test_issue_store_failure_propagates_without_send(method):
    store = failing_store(**{method: True})
    sender = mock.Mock()
    service = EmailCodeService(store, sender)

    with pytest.raises(StoreError):
        service.issue(RECIPIENT)
    sender.send.assert_not_called()


def test_issue_ttl_failure_propagates_without_send():
    store = failing_store(ttl=True)
    store.get.return_value = "123456"
    sender = mock.Mock()
    service = EmailCodeService(store, sender)

    with pytest.raises(StoreError):
        service.issue(RECIPIENT)
    store.set.assert_not_called()
    sender.send.assert_not_called()


@pytest.mark.parametrize("method", ["get", "delete"])
def test_validate_store_failure_propagates(method):
    store = failing_store(**{method: True})
    store.get.return_value = "123456"
    service = EmailCodeService(store, mock.Mock())

    with pytest.raises(StoreError):
        service.validate(RECIPIENT, "123456")
