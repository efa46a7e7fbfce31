from .azure_identity import get_access_token, get_credentials
from .azure_key_vault import get_secret
from .azure_postgresql import get_connection_string
from .redis_cache import RedisCache, create_redis_client
from .app_version import AppVersionMarker, MSG_APP_VERSION, MSG_CONFIG_CHANGED

__all__ = [
    "get_access_token",
    "get_credentials",
    "get_secret",
    "get_connection_string",
    "RedisCache",
    "create_redis_client",
    "AppVersionMarker",
    "MSG_APP_VERSION",
    "MSG_CONFIG_CHANGED",
]
