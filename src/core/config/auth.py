"""Authentication settings: access-token signing and OAuth providers.
"""

import logging
from pathlib import Path

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for access-token signing and the OAuth providers.

    HMAC algorithms (``HS*``) sign with ``JWT_SECRET_KEY``; RSA algorithms
    (``RS*``) sign with ``JWT_PRIVATE_KEY`` and verify with ``JWT_PUBLIC_KEY``,
    which may also be supplied as ``private.pem``/``public.pem`` files.

    Security Note:
        - Signing keys must be stored securely and rotated regularly.
        - OAuth client secrets should never be exposed in logs or version control.
    """

    # OAuth settings
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: SecretStr = SecretStr("")

    # JWT settings
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: SecretStr = SecretStr("")
    JWT_PRIVATE_KEY: SecretStr = SecretStr("")
    JWT_PUBLIC_KEY: str = ""
    JWT_ISSUER: str = "portcullis"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    @model_validator(mode="after")
    def _load_and_validate_jwt_keys(self) -> "AuthSettings":
        """Ensures a usable signing key exists for the configured algorithm.

        Raises:
            ValueError: If no key matching ``JWT_ALGORITHM`` is configured.
        """
        if self.JWT_ALGORITHM.startswith("HS"):
            if not self.JWT_SECRET_KEY.get_secret_value():
                error_msg = f"JWT_SECRET_KEY is required for {self.JWT_ALGORITHM} signing."
                logger.error(error_msg)
                raise ValueError(error_msg)
            return self

        self._load_keys_from_pem_files()
        if not self.JWT_PRIVATE_KEY.get_secret_value() or not self.JWT_PUBLIC_KEY:
            error_msg = (
                "JWT keys not found. Please provide JWT_PRIVATE_KEY and JWT_PUBLIC_KEY "
                "either via .env variables or through private.pem/public.pem files."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info("JWT keys validated successfully.")
        return self

    def _load_keys_from_pem_files(self) -> None:
        """Loads JWT keys from private.pem and public.pem if they exist.

        These files override any existing environment variables.
        """
        private_key_path = Path("private.pem").resolve()
        public_key_path = Path("public.pem").resolve()

        if private_key_path.is_file():
            private_key = private_key_path.read_text().strip()
            if private_key:
                self.JWT_PRIVATE_KEY = SecretStr(private_key)
                logger.info("Loaded JWT private key from private.pem, overriding env var if set.")

        if public_key_path.is_file():
            public_key = public_key_path.read_text().strip()
            if public_key:
                self.JWT_PUBLIC_KEY = public_key
                logger.info("Loaded JWT public key from public.pem, overriding env var if set.")

    @property
    def jwt_signing_key(self) -> str:
        if self.JWT_ALGORITHM.startswith("HS"):
            return self.JWT_SECRET_KEY.get_secret_value()
        return self.JWT_PRIVATE_KEY.get_secret_value()

    @property
    def jwt_verification_key(self) -> str:
        if self.JWT_ALGORITHM.startswith("HS"):
            return self.JWT_SECRET_KEY.get_secret_value()
        return self.JWT_PUBLIC_KEY
