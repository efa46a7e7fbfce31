class SettingError(Exception):
    """Base class for setting errors."""


class SettingNotFoundError(SettingError, LookupError):
    """Raised when no setting with the given name exists."""

    def __init__(self, name: str):
        super().__init__(f"Can't find config setting '{name}'")
        self.name = name


class SettingAlreadyExistsError(SettingError):
    def __init__(self, name: str):
        super().__init__(f"Config setting '{name}' already exists")
        self.name = name


class SettingValidationError(SettingError, ValueError):
    """Raised when a value is rejected by one of the setting's validators."""

    def __init__(self, name: str, errors: list[str]):
        super().__init__(f"Invalid value for config setting '{name}': {'; '.join(errors)}")
        self.name = name
        self.errors = errors
