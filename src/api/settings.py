from typing import Any

import dotenv
from loguru import logger

from ..database import init_database, init_session_manager
from ..setting import (
    SettingNotFoundError,
    SettingService,
    SettingValidationError,
    get_setting_service,
    init_setting_service,
)

dotenv.load_dotenv()


def _service() -> SettingService:
    """Global setting service, wired on first use."""
    try:
        return get_setting_service()
    except RuntimeError:
        logger.info("Wiring setting service on first use")
        init_database(init_session_manager())
        return init_setting_service()


async def get_setting(name: str) -> dict:
    """Return the resolved value of one setting."""
    logger.info("Get setting {}", name)
    try:
        value = _service().get(name, strict=True)
    except SettingNotFoundError as e:
        logger.warning(str(e))
        return {"status": "not_found", "message": str(e)}
    return {"status": "success", "name": name, "value": value}


async def set_setting(name: str, value: Any) -> dict:
    """Store a new value for one setting."""
    logger.info("Set setting {}", name)
    service = _service()
    try:
        service.set(name, value)
    except SettingNotFoundError as e:
        logger.warning(str(e))
        return {"status": "not_found", "message": str(e)}
    except SettingValidationError as e:
        logger.warning(str(e))
        return {"status": "invalid", "message": str(e), "errors": e.errors}
    return {"status": "success", "name": name, "value": service.get(name)}


async def reset_setting(name: str, force: bool = False) -> dict:
    """Restore the initial value of one setting."""
    logger.info("Reset setting {} (force={})", name, force)
    service = _service()
    try:
        service.reset(name, force=force)
    except SettingNotFoundError as e:
        logger.warning(str(e))
        return {"status": "not_found", "message": str(e)}
    return {"status": "success", "name": name, "value": service.get(name)}


async def reload_settings() -> dict:
    """Force a full re-read of every setting in this process."""
    logger.info("Reload settings")
    service = _service()
    service.reload()
    return {"status": "success", "count": len(service.cache.current)}
