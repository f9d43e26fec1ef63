from __future__ import annotations

"""Request‐payload Pydantic models for authentication endpoints."""

from typing import Annotated, Any, Dict, Optional

from pydantic import AnyHttpUrl, BaseModel, BeforeValidator, EmailStr, Field, constr

# ---------------------------------------------------------------------------
# Shared / primitive types ---------------------------------------------------
# ---------------------------------------------------------------------------

NameStr = constr(strip_whitespace=True, min_length=2, max_length=100, pattern=r"^[A-Za-z\s\-'.]+$")
PhoneStr = constr(strip_whitespace=True, pattern=r"^\+[1-9]\d{6,15}$")
PasswordStr = constr(min_length=1, max_length=128)


def _lower_email(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value

EmailAddress = Annotated[EmailStr, BeforeValidator(_lower_email)]


# ---------------------------------------------------------------------------
# Concrete request models ----------------------------------------------------
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Payload expected by ``POST /auth/signup``."""

    name: NameStr = Field(..., examples=["Alice Smith"])
    email: EmailAddress = Field(..., examples=["alice@example.com"])
    phone: Optional[PhoneStr] = Field(default=None, examples=["+14155550123"])
    password: PasswordStr = Field(..., examples=["Passw0rd!"])
    redirect_url: AnyHttpUrl = Field(..., examples=["https://app.example.com/verify-email"])


class SigninRequest(BaseModel):
    """Payload expected by ``POST /auth/signin``."""

    email: EmailAddress = Field(..., examples=["alice@example.com"])
    password: PasswordStr = Field(..., examples=["Passw0rd!"])


class VerifyEmailRequest(BaseModel):
    """Payload expected by ``POST /auth/verify-email``."""

    token: str = Field(..., min_length=1, max_length=256, description="Token from the verification link")


class ForgotPasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/forgot-password``."""

    email: EmailAddress = Field(
        ...,
        examples=["alice@example.com"],
        description="Email address to send password reset instructions to",
    )
    redirect_url: AnyHttpUrl = Field(..., examples=["https://app.example.com/reset-password"])


class ResetPasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/reset-password``."""

    token: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Password reset token received via email",
    )
    password: PasswordStr = Field(
        ...,
        examples=["NewPassw0rd!"],
        description="New password that meets security policy requirements",
    )


class OAuthAuthenticateRequest(BaseModel):
    """Payload expected by ``POST /auth/oauth/{provider}``."""

    token: Dict[str, Any] = Field(
        ..., examples=[{"access_token": "ya29.a0AfH6SMC...", "expires_at": 1640995200}]
    )


class UpdateProfileRequest(BaseModel):
    """Payload expected by ``PUT /auth/profile``.

    Every field is optional. ``redirect_url`` must accompany a new ``email``.
    """

    name: Optional[NameStr] = None
    phone: Optional[PhoneStr] = None
    email: Optional[EmailAddress] = None
    password: Optional[PasswordStr] = None
    redirect_url: Optional[AnyHttpUrl] = None
