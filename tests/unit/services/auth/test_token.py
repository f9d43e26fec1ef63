import jwt
import pytest

from src.core.exceptions import (
    AccessTokenAudienceError,
    AccessTokenExpiredError,
    MalformedAccessTokenError,
)
from src.domain.services.auth.token import AccessTokenService

KEY = "unit-test-signing-key-0123456789abcdef"


@pytest.fixture
def service():
    return AccessTokenService(signing_key=KEY, verification_key=KEY, expire_minutes=15)


def test_sign_and_verify(service):
    token = service.sign("user-1", "alice@x.com", "examaxis")

    claims = service.verify(token, "examaxis")

    assert claims.user_id == "user-1"
    assert claims.email == "alice@x.com"
    assert claims.service_id == "examaxis"
    assert service.expires_in == 900


def test_token_carries_audience_and_unique_jti(service):
    first = jwt.decode(service.sign("u", "a@x.com", "examaxis"), options={"verify_signature": False})
    second = jwt.decode(service.sign("u", "a@x.com", "examaxis"), options={"verify_signature": False})

    assert first["aud"] == "examaxis"
    assert first["iss"] == service.issuer
    assert first["jti"] != second["jti"]


def test_token_for_another_service_is_rejected(service):
    token = service.sign("user-1", "alice@x.com", "examaxis")

    with pytest.raises(AccessTokenAudienceError):
        service.verify(token, "quizhub")


def test_expired_token_is_rejected():
    expired = AccessTokenService(signing_key=KEY, verification_key=KEY, expire_minutes=-1)
    token = expired.sign("user-1", "alice@x.com", "examaxis")

    with pytest.raises(AccessTokenExpiredError):
        expired.verify(token, "examaxis")


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        jwt.encode({"sub": "user-1", "aud": "examaxis"}, KEY, algorithm="HS256"),
        AccessTokenService(signing_key="another-key-0123456789abcdef0123", verification_key="x").sign(
            "user-1", "alice@x.com", "examaxis"
        ),
    ],
)
def test_malformed_tokens_are_rejected(service, token):
    with pytest.raises(MalformedAccessTokenError):
        service.verify(token, "examaxis")
