"""
Unit tests for services.mailer.
SMTP is replaced with a MagicMock; no network traffic.
"""
import smtplib
from unittest.mock import MagicMock

import pytest

from vidvault.config import settings
from vidvault.services import mailer as mailer_module
from vidvault.services.mailer import (
    EmailSender,
    MailDeliveryError,
    login_token_template,
    notification_template,
    welcome_template,
)


def _settings(**overrides):
    base = {
        "mail_host": "smtp.test",
        "mail_port": 587,
        "mail_secure": False,
        "mail_user": "robot@vidvault.test",
        "mail_password": "secret",
        "mail_from": "noreply@vidvault.test",
        "mail_from_name": "VidVault",
    }
    base.update(overrides)
    return settings.model_copy(update=base)


@pytest.fixture
def fake_smtp(monkeypatch):
    server = MagicMock()
    factory = MagicMock(return_value=server)
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", factory)
    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", factory)
    return factory, server


@pytest.mark.asyncio
async def test_login_token_is_sent_over_starttls(fake_smtp):
    factory, server = fake_smtp
    sender = EmailSender(_settings())

    await sender.send_login_token("a@x.com", "AB12CD")

    factory.assert_called_once_with("smtp.test", 587, timeout=settings.mail_timeout)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("robot@vidvault.test", "secret")
    from_addr, to_addrs, raw = server.sendmail.call_args.args
    assert from_addr == "noreply@vidvault.test"
    assert to_addrs == ["a@x.com"]
    assert "Subject: Your access code - VidVault" in raw
    server.quit.assert_called_once()


@pytest.mark.asyncio
async def test_implicit_tls_skips_starttls(fake_smtp):
    _, server = fake_smtp
    sender = EmailSender(_settings(mail_secure=True, mail_port=465))

    await sender.send_welcome_email("b@x.com", "Bea")

    server.starttls.assert_not_called()
    server.sendmail.assert_called_once()


@pytest.mark.asyncio
async def test_login_token_failure_raises(fake_smtp):
    _, server = fake_smtp
    server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({"a@x.com": (550, b"no")})
    sender = EmailSender(_settings())

    with pytest.raises(MailDeliveryError):
        await sender.send_login_token("a@x.com", "AB12CD")
    server.quit.assert_called_once()


@pytest.mark.asyncio
async def test_connection_error_raises_delivery_error(fake_smtp):
    factory, _ = fake_smtp
    factory.side_effect = ConnectionRefusedError("refused")
    sender = EmailSender(_settings())

    with pytest.raises(MailDeliveryError):
        await sender.send_login_token("a@x.com", "AB12CD")


@pytest.mark.asyncio
async def test_welcome_and_notification_failures_are_swallowed(fake_smtp):
    factory, _ = fake_smtp
    factory.side_effect = OSError("network down")
    sender = EmailSender(_settings())

    # Neither call raises
    await sender.send_welcome_email("c@x.com", None)
    await sender.send_notification_email("c@x.com", "New video", "<p>Enjoy</p>")


@pytest.mark.asyncio
async def test_verify_without_credentials_returns_false(fake_smtp):
    factory, _ = fake_smtp
    sender = EmailSender(_settings(mail_user=None, mail_password=None))

    assert await sender.verify() is False
    factory.assert_not_called()


@pytest.mark.asyncio
async def test_verify_reports_smtp_outcome(fake_smtp):
    factory, server = fake_smtp
    sender = EmailSender(_settings())
    assert await sender.verify() is True
    server.quit.assert_called_once()

    factory.side_effect = smtplib.SMTPConnectError(421, "busy")
    assert await sender.verify() is False


class TestTemplates:
    def test_login_template_shows_code_and_expiry(self):
        html = login_token_template("XY98ZW", "VidVault")
        assert "XY98ZW" in html
        assert "10 minutes" in html

    def test_welcome_template_greets_by_name(self):
        assert "Hello, Ana!" in welcome_template("Ana")
        assert "Hello, there!" in welcome_template(None)

    def test_notification_template_includes_subject_and_body(self):
        html = notification_template("Heads up", "<p>New videos</p>", "VidVault")
        assert "Heads up" in html
        assert "<p>New videos</p>" in html
