from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import EmailServiceError
from src.domain.interfaces.services import EmailMessage
from src.infrastructure.services.email.email_service import (
    EmailTemplateRenderer,
    SmtpEmailSender,
    build_token_link,
)


@pytest.mark.parametrize(
    "redirect_url, expected",
    [
        ("https://app.example.com/verify", "https://app.example.com/verify?token=abc"),
        ("https://app.example.com/verify?lang=de", "https://app.example.com/verify?lang=de&token=abc"),
        ("https://app.example.com/verify?token=old", "https://app.example.com/verify?token=abc"),
        ("https://app.example.com/verify#done", "https://app.example.com/verify?token=abc#done"),
    ],
)
def test_build_token_link(redirect_url, expected):
    assert build_token_link(redirect_url, "abc") == expected


def test_verification_email_contains_link_in_both_parts():
    renderer = EmailTemplateRenderer()

    message = renderer.verification_email("Alice", "tok123", "https://app.example.com/verify")

    assert message.subject == "Verify your email address"
    assert "https://app.example.com/verify?token=tok123" in message.text
    assert "https://app.example.com/verify?token=tok123" in message.html
    assert "Alice" in message.html


def test_email_change_uses_its_own_subject():
    message = EmailTemplateRenderer().verification_email(
        "Alice", "tok", "https://app.example.com/verify", is_email_change=True
    )

    assert message.subject == "Confirm your new email address"


def test_html_part_escapes_user_supplied_name():
    message = EmailTemplateRenderer().verification_email(
        "<script>alert(1)</script>", "tok", "https://app.example.com/verify"
    )

    assert "<script>" not in message.html
    assert "&lt;script&gt;" in message.html


def test_password_reset_email():
    message = EmailTemplateRenderer().password_reset_email("Alice", "r3set", "https://app.example.com/reset")

    assert message.subject == "Reset your password"
    assert "https://app.example.com/reset?token=r3set" in message.text


def test_missing_template_raises_email_service_error(tmp_path):
    renderer = EmailTemplateRenderer(templates_dir=str(tmp_path))

    with pytest.raises(EmailServiceError):
        renderer.password_reset_email("Alice", "tok", "https://app.example.com/reset")


@pytest.mark.asyncio
async def test_test_mode_sender_does_not_deliver():
    sender = SmtpEmailSender(test_mode=True)

    await sender.send("alice@x.com", EmailMessage(subject="s", html="<p>h</p>", text="t"))

    assert sender.fastmail is None


@pytest.mark.asyncio
async def test_smtp_failure_raises_email_service_error():
    sender = SmtpEmailSender(test_mode=True)
    sender.test_mode = False
    sender.fastmail = AsyncMock()
    sender.fastmail.send_message.side_effect = ConnectionRefusedError("smtp down")

    with pytest.raises(EmailServiceError):
        await sender.send("alice@x.com", EmailMessage(subject="s", html="<p>h</p>", text="t"))


@pytest.mark.asyncio
async def test_smtp_delivery_builds_multipart_message():
    sender = SmtpEmailSender(test_mode=True)
    sender.test_mode = False
    sender.fastmail = AsyncMock()

    await sender.send("alice@x.com", EmailMessage(subject="Hello", html="<p>h</p>", text="t"))

    schema = sender.fastmail.send_message.await_args.args[0]
    assert schema.subject == "Hello"
    assert schema.body == "<p>h</p>"
    assert schema.alternative_body == "t"
