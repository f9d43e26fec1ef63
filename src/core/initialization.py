"""Process-level setup run once before the FastAPI application is built."""

from dotenv import load_dotenv

from src.core.config.settings import settings
from src.core.logging import configure_logging
from src.utils.i18n import setup_i18n


def initialize_application() -> None:
    """Load ``.env`` into the process environment, configure structlog and
    load the message catalogues."""
    load_dotenv(override=True)
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    setup_i18n()
