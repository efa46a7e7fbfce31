"""Application settings with a process-wide cache.

Responsibilities:
- Persist named settings with their initial and current state
- Serve resolved values from a TTL and change-token checked cache
- Expand ``#{config.NAME}`` references between settings
- Propagate writes to other processes and to live clients
"""

from .cache import SettingCache
from .exceptions import (
    SettingAlreadyExistsError,
    SettingError,
    SettingNotFoundError,
    SettingValidationError,
)
from .interpolation import interpolate, resolve_all
from .notifier import (
    AUTHENTICATED,
    PUBLIC,
    BroadcastNotifier,
    LocalBroadcastNotifier,
    RedisBroadcastNotifier,
)
from .service import SettingService, get_setting_service, init_setting_service
from .token_store import ChangeTokenStore
from .validators import register_validator, validate_setting

__all__ = [
    "SettingCache",
    "SettingService",
    "ChangeTokenStore",
    "BroadcastNotifier",
    "LocalBroadcastNotifier",
    "RedisBroadcastNotifier",
    "AUTHENTICATED",
    "PUBLIC",
    "SettingError",
    "SettingNotFoundError",
    "SettingAlreadyExistsError",
    "SettingValidationError",
    "interpolate",
    "resolve_all",
    "register_validator",
    "validate_setting",
    "init_setting_service",
    "get_setting_service",
]
