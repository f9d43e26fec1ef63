import pytest

from src.core.exceptions import PasswordPolicyError
from src.domain.services.auth.password_policy import PasswordPolicyValidator


@pytest.fixture
def validator():
    return PasswordPolicyValidator()


def test_strong_password_passes(validator):
    validator.validate("Passw0rd!")


@pytest.mark.parametrize(
    "password, fragment",
    [
        ("Pa0!", "at least 8 characters"),
        ("passw0rd!", "uppercase"),
        ("PASSW0RD!", "lowercase"),
        ("Password!", "number"),
        ("Passw0rdd", "special character"),
    ],
)
def test_weak_passwords_are_rejected(validator, password, fragment):
    with pytest.raises(PasswordPolicyError) as exc_info:
        validator.validate(password)

    assert fragment in exc_info.value.message


def test_requirements_can_be_relaxed(validator):
    validator.require_special_char = False
    validator.require_uppercase = False

    validator.validate("passw0rdd")


@pytest.mark.parametrize("password", ["Passw0rd_", "Passw0rd€", "Passw0rd §"])
def test_any_symbol_counts_as_special(validator, password):
    assert validator.first_unmet_rule(password) is None


def test_length_is_reported_before_character_classes(validator):
    assert validator.first_unmet_rule("abc") == "password_too_short"
    assert validator.first_unmet_rule("abcdefgh") == "password_no_uppercase"
