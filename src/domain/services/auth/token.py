import secrets
from datetime import datetime, timedelta, timezone

import jwt
from jwt import ExpiredSignatureError, InvalidAudienceError, PyJWTError
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import (
    AccessTokenAudienceError,
    AccessTokenExpiredError,
    MalformedAccessTokenError,
)
from src.domain.interfaces.services import AccessTokenClaims, IAccessTokenService
from src.utils.i18n import get_translated_message

logger = get_logger(__name__)


class AccessTokenService(IAccessTokenService):
    """Signs and verifies short-lived JWT access tokens with PyJWT.

    The token audience is the service id the account belongs to, so tokens
    cannot be replayed across tenants. Access tokens are never persisted;
    revocation happens at the refresh-token level.

    Payload claims: ``sub`` (account id), ``email``, ``service_id``, ``iss``,
    ``aud``, ``iat``, ``exp`` and a random ``jti``.
    """

    def __init__(
        self,
        signing_key: str | None = None,
        verification_key: str | None = None,
        algorithm: str | None = None,
        issuer: str | None = None,
        expire_minutes: int | None = None,
    ):
        self.signing_key = signing_key or settings.jwt_signing_key
        self.verification_key = verification_key or settings.jwt_verification_key
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.issuer = issuer or settings.JWT_ISSUER
        self.lifetime = timedelta(minutes=expire_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def expires_in(self) -> int:
        return int(self.lifetime.total_seconds())

    def sign(self, user_id: str, email: str, service_id: str) -> str:
        """Create a signed access token.

        Args:
            user_id (str): Account id, stored as ``sub``.
            email (str): Account email.
            service_id (str): Tenant, stored as both ``service_id`` and ``aud``.

        Returns:
            str: Encoded JWT.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "service_id": service_id,
            "iss": self.issuer,
            "aud": service_id,
            "iat": now,
            "exp": now + self.lifetime,
            "jti": secrets.token_urlsafe(24),
        }
        token = jwt.encode(payload, self.signing_key, algorithm=self.algorithm)
        logger.debug("Access token created", user_id=user_id, service_id=service_id)
        return token

    def verify(self, token: str, service_id: str, language: str = "en") -> AccessTokenClaims:
        """Validate an access token for ``service_id``.

        Raises:
            AccessTokenExpiredError: If ``exp`` is in the past.
            AccessTokenAudienceError: If the token was issued for another service.
            MalformedAccessTokenError: For bad signatures, wrong issuer or missing claims.
        """
        try:
            payload = jwt.decode(
                token,
                self.verification_key,
                algorithms=[self.algorithm],
                audience=service_id,
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "aud", "iss"]},
            )
        except ExpiredSignatureError:
            raise AccessTokenExpiredError(get_translated_message("access_token_expired", language))
        except InvalidAudienceError:
            logger.warning("Access token presented to another service", service_id=service_id)
            raise AccessTokenAudienceError(get_translated_message("access_token_wrong_service", language))
        except PyJWTError as e:
            logger.warning("Malformed access token", error=type(e).__name__)
            raise MalformedAccessTokenError(get_translated_message("access_token_invalid", language))

        email = payload.get("email")
        if not isinstance(email, str):
            raise MalformedAccessTokenError(get_translated_message("access_token_invalid", language))
        return AccessTokenClaims(user_id=str(payload["sub"]), email=email, service_id=service_id)
