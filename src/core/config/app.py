"""
Application-specific settings.
"""
from typing import List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, debug mode, CORS origins
    and the tenant allow-list.

    Security Note:
        - Ensure ALLOWED_ORIGINS is explicitly set to trusted domains in production
          to prevent unauthorized cross-origin requests.
        - SUPPORTED_SERVICES is the list of tenants this deployment serves. Requests
          naming any other service are rejected before they reach the services.
    """
    PROJECT_NAME: str = "portcullis"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_WORKERS: int = Field(ge=1, default=1)
    RELOAD: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    SECRET_KEY: str = Field(..., min_length=32)
    ALLOWED_ORIGINS: Union[str, List[str]] = Field(default="http://0.0.0.0:8000")
    DEFAULT_LANGUAGE: str = "en"
    SUPPORTED_LANGUAGES: Union[str, List[str]] = Field(default=["en"])
    SUPPORTED_SERVICES: Union[str, List[str]] = Field(default=["examaxis"])

    @field_validator("ALLOWED_ORIGINS", "SUPPORTED_LANGUAGES", "SUPPORTED_SERVICES", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string into a list of stripped values.

        Args:
            v: Input value as a string or list.

        Returns:
            List of stripped, non-empty strings.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v
