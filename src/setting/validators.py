"""Named value validators referenced from ``preferences["validations"]``."""

import re
from typing import Any, Callable

from ..models import Setting
from .exceptions import SettingValidationError

Validator = Callable[[Any], str | None]

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _integer(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return "must be an integer"
    return None


def _boolean(value: Any) -> str | None:
    if not isinstance(value, bool):
        return "must be true or false"
    return None


def _not_blank(value: Any) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "must not be blank"
    return None


def _email_address(value: Any) -> str | None:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
        return "must be a valid email address"
    return None


VALIDATORS: dict[str, Validator] = {
    "integer": _integer,
    "boolean": _boolean,
    "not_blank": _not_blank,
    "email_address": _email_address,
}


def register_validator(name: str, validator: Validator) -> None:
    VALIDATORS[name] = validator


def validate_setting(setting: Setting) -> None:
    """Run every validator the setting lists against its current value.

    Raises:
        SettingValidationError: if any validator rejects the value, or a
            listed validator is not registered.
    """
    names = (setting.preferences or {}).get("validations") or []
    errors = []
    for name in names:
        validator = VALIDATORS.get(name)
        if validator is None:
            errors.append(f"unknown validator '{name}'")
            continue
        error = validator(setting.value)
        if error:
            errors.append(error)
    if errors:
        raise SettingValidationError(setting.name, errors)
