"""Email delivery and template rendering.

`SmtpEmailSender` delivers messages through fastapi-mail. In test mode the
message is logged instead of sent. `EmailTemplateRenderer` renders the
verification and password reset emails from Jinja2 templates with
HTML auto-escaping enabled.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from src.core.config.settings import settings
from src.core.exceptions import EmailServiceError
from src.core.logging import mask_email
from src.domain.interfaces.services import EmailMessage, IEmailComposer, IEmailSender
from src.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)


def build_token_link(redirect_url: str, token: str) -> str:
    """Appends ``token`` to ``redirect_url`` as the ``token`` query parameter."""
    parts = urlsplit(redirect_url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != "token"]
    query.append(("token", token))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class SmtpEmailSender(IEmailSender):
    """Sends email over SMTP using fastapi-mail.

    Attributes:
        test_mode (bool): When set, messages are logged and never sent.
    """

    def __init__(self, test_mode: Optional[bool] = None):
        self.test_mode = settings.EMAIL_TEST_MODE if test_mode is None else test_mode
        self.fastmail: Optional[FastMail] = None
        if not self.test_mode:
            try:
                settings.validate_smtp_config()
            except ValueError as e:
                logger.warning("Email configuration validation warning", error=str(e))
            self.fastmail = FastMail(self._connection_config())

        logger.info(
            "SmtpEmailSender initialized",
            test_mode=self.test_mode,
            smtp_configured=bool(settings.EMAIL_SMTP_USERNAME),
        )

    @staticmethod
    def _connection_config() -> ConnectionConfig:
        password = settings.EMAIL_SMTP_PASSWORD.get_secret_value() if settings.EMAIL_SMTP_PASSWORD else ""
        return ConnectionConfig(
            MAIL_USERNAME=settings.EMAIL_SMTP_USERNAME or "",
            MAIL_PASSWORD=password,
            MAIL_FROM=settings.EMAIL_FROM_EMAIL,
            MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
            MAIL_PORT=settings.EMAIL_SMTP_PORT,
            MAIL_SERVER=settings.EMAIL_SMTP_HOST,
            MAIL_STARTTLS=settings.EMAIL_SMTP_USE_TLS,
            MAIL_SSL_TLS=settings.EMAIL_SMTP_USE_SSL,
            USE_CREDENTIALS=bool(settings.EMAIL_SMTP_USERNAME and settings.EMAIL_SMTP_PASSWORD),
            VALIDATE_CERTS=True,
        )

    async def send(self, to_address: str, message: EmailMessage) -> None:
        """Delivers ``message`` to ``to_address``.

        Raises:
            EmailServiceError: If the SMTP delivery fails.
        """
        if self.test_mode or self.fastmail is None:
            await logger.ainfo("Email (test mode)", email=to_address, subject=message.subject)
            return

        schema = MessageSchema(
            subject=message.subject,
            recipients=[to_address],
            body=message.html,
            alternative_body=message.text,
            subtype=MessageType.html,
            multipart_subtype="alternative",
        )
        try:
            await self.fastmail.send_message(schema)
        except Exception as e:
            await logger.aerror(
                "Failed to send email",
                email=to_address,
                subject=message.subject,
                error=str(e),
            )
            raise EmailServiceError(get_translated_message("email_service_error")) from e

        await logger.ainfo("Email sent", email=to_address, subject=message.subject)


class EmailTemplateRenderer(IEmailComposer):
    """Renders transactional emails from ``<name>.html`` and ``<name>.txt`` templates.

    The plaintext token only ever appears inside the rendered link.
    """

    def __init__(self, templates_dir: Optional[str] = None):
        template_dir = Path(templates_dir or settings.EMAIL_TEMPLATES_DIR)
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(enabled_extensions=("html",)),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _render(self, template_name: str, subject: str, context: Dict[str, Any]) -> EmailMessage:
        context = {"app_name": settings.EMAIL_FROM_NAME, "subject": subject, **context}
        try:
            html = self.jinja_env.get_template(f"{template_name}.html").render(**context)
            text = self.jinja_env.get_template(f"{template_name}.txt").render(**context)
        except TemplateError as e:
            logger.error("Email template rendering failed", template=template_name, error=str(e))
            raise EmailServiceError(get_translated_message("email_service_error")) from e
        return EmailMessage(subject=subject, html=html, text=text)

    def verification_email(
        self, name: str, token: str, redirect_url: str, is_email_change: bool = False, language: str = "en"
    ) -> EmailMessage:
        subject_key = "email_change_subject" if is_email_change else "email_verification_subject"
        return self._render(
            "verification",
            get_translated_message(subject_key, language),
            {
                "user_name": name,
                "verification_url": build_token_link(redirect_url, token),
                "is_email_change": is_email_change,
                "expires_hours": settings.EMAIL_TOKEN_EXPIRE_MINUTES // 60,
            },
        )

    def password_reset_email(self, name: str, token: str, redirect_url: str, language: str = "en") -> EmailMessage:
        return self._render(
            "password_reset",
            get_translated_message("password_reset_subject", language),
            {
                "user_name": name,
                "reset_url": build_token_link(redirect_url, token),
                "expires_minutes": settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES,
            },
        )
