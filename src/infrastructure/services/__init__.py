"""Infrastructure Services.

Concrete implementations of the collaborator interfaces declared in
``src.domain.interfaces.services``.

Service Categories:
- Email: Jinja2 template rendering and SMTP delivery
- Disposable email: external lookup of throwaway domains
- OAuth: provider profile fetching through authlib
"""

from .disposable_email import DebounceDisposableEmailChecker, NullDisposableEmailChecker
from .email.email_service import EmailTemplateRenderer, SmtpEmailSender, build_token_link
from .oauth_client import AuthlibOAuthProfileClient

__all__ = [
    "EmailTemplateRenderer",
    "SmtpEmailSender",
    "build_token_link",
    "DebounceDisposableEmailChecker",
    "NullDisposableEmailChecker",
    "AuthlibOAuthProfileClient",
]
