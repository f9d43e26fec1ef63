import re
from typing import Optional

from src.core.config.settings import settings
from src.core.exceptions import PasswordPolicyError
from src.utils.i18n import get_translated_message

# (toggle attribute, pattern the password must contain, message key), in reporting order.
_CHARACTER_RULES = (
    ("require_uppercase", re.compile(r"[A-Z]"), "password_no_uppercase"),
    ("require_lowercase", re.compile(r"[a-z]"), "password_no_lowercase"),
    ("require_digit", re.compile(r"\d"), "password_no_digit"),
    ("require_special_char", re.compile(r"[^\w\s]|_"), "password_no_special_char"),
)


class PasswordPolicyValidator:
    """Checks new passwords against the configured strength rules.

    Length is checked first, then each enabled character class. Only the first
    unmet rule is reported. Any printable character that is neither a letter,
    a digit nor whitespace counts as special.
    """

    def __init__(self):
        self.min_length = settings.PASSWORD_MIN_LENGTH
        self.require_uppercase = settings.PASSWORD_REQUIRE_UPPERCASE
        self.require_lowercase = settings.PASSWORD_REQUIRE_LOWERCASE
        self.require_digit = settings.PASSWORD_REQUIRE_DIGIT
        self.require_special_char = settings.PASSWORD_REQUIRE_SPECIAL_CHAR

    def first_unmet_rule(self, password: str) -> Optional[str]:
        """Return the message key of the first rule ``password`` breaks, or None."""
        if len(password) < self.min_length:
            return "password_too_short"
        for toggle, pattern, key in _CHARACTER_RULES:
            if getattr(self, toggle) and pattern.search(password) is None:
                return key
        return None

    def validate(self, password: str, language: str = "en") -> None:
        """Raise ``PasswordPolicyError`` unless ``password`` satisfies every enabled rule."""
        key = self.first_unmet_rule(password)
        if key is None:
            return
        raise PasswordPolicyError(get_translated_message(key, language).format(length=self.min_length))
