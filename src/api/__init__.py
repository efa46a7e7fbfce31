from .health import health
from .settings import get_setting, set_setting, reset_setting, reload_settings
from .setup import setup

__all__ = [
    "health",
    "get_setting",
    "set_setting",
    "reset_setting",
    "reload_settings",
    "setup",
]
