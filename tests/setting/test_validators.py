import pytest

from src.models import Setting
from src.setting import SettingValidationError, register_validator, validate_setting


def _setting(value, validations):
    return Setting(name="x", state_current=value, preferences={"validations": validations})


@pytest.mark.unit
@pytest.mark.parametrize("validations, value", [
    ([], "anything"),
    (["integer"], 3),
    (["boolean"], False),
    (["not_blank"], "x"),
    (["email_address"], "support@example.com"),
    (["integer", "not_blank"], 0),
])
def test_valid_values(validations, value):
    validate_setting(_setting(value, validations))


@pytest.mark.unit
@pytest.mark.parametrize("validations, value", [
    (["integer"], "3"),
    (["integer"], True),
    (["boolean"], "yes"),
    (["not_blank"], "   "),
    (["not_blank"], None),
    (["email_address"], "not-an-email"),
    (["no_such_validator"], 1),
])
def test_invalid_values(validations, value):
    with pytest.raises(SettingValidationError) as exc_info:
        validate_setting(_setting(value, validations))
    assert exc_info.value.name == "x"
    assert len(exc_info.value.errors) == 1


@pytest.mark.unit
def test_register_validator():
    register_validator("even", lambda value: None if value % 2 == 0 else "must be even")

    validate_setting(_setting(2, ["even"]))
    with pytest.raises(SettingValidationError):
        validate_setting(_setting(3, ["even"]))
