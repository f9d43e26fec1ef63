import pytest

from src.core.logging import _mask_email_fields, mask_email


@pytest.mark.parametrize(
    "email, expected",
    [
        ("jonathan@example.com", "jon***@example.com"),
        ("bob@example.com", "bob@example.com"),
        ("not-an-email", "unknown"),
        (None, "unknown"),
        (42, "unknown"),
    ],
)
def test_mask_email(email, expected):
    assert mask_email(email) == expected


def test_processor_masks_every_email_key():
    event = {"event": "x", "email": "alice.smith@x.com", "pending_email": "alice.new@x.com", "user_id": "u1"}

    masked = _mask_email_fields(None, "info", event)

    assert masked == {"event": "x", "email": "ali***@x.com", "pending_email": "ali***@x.com", "user_id": "u1"}
