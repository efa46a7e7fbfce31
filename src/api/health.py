from typing import Literal

import dotenv
from loguru import logger
from sqlalchemy import inspect

from src.config import SettingsManager
from src.database.migrations import verify_schema

dotenv.load_dotenv()

async def health(
        route: Literal['postgres', 'redis'] | None = None,
    ) -> dict:
    """Health check function.

    Args:
        route (str): Specific route to check. Options are 'postgres', 'redis'.

    Returns:
        dict: Health status information.
    """
    logger.info("Health check invoked")

    # Validate settings
    settings = SettingsManager.get_instance()
    errors = settings.validate()
    if errors:
        logger.error(f"Settings validation errors: {errors}")
        return {"status": "error", "errors": errors}

    if route is None:
        logger.info("No specific route provided, returning overall readiness")
        return {"status": "success"}

    route_normalised = route.strip().lower()
    logger.info(f"Health check route: {route_normalised}")

    if route_normalised == "postgres":
        # Test database connection
        try:
            from src.database import init_session_manager
            session_manager = init_session_manager()
            inspector = inspect(session_manager.engine)
            existing_tables = set(inspector.get_table_names())
            logger.info(f"Database connection successful, found {len(existing_tables)} tables")
            session_manager.ping()
            verification = verify_schema(session_manager)
            return {"status": "success", "postgres": f"connected (verification {verification['status']}, {len(existing_tables)} tables)"}
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return {"status": "error", "postgres": "disconnected", "error": str(e)}

    if route_normalised == "redis":
        # Test Redis connection and the change token
        try:
            from src.services import RedisCache
            cache = RedisCache.from_settings(settings)
            cache.ping()
            token = cache.get_value(settings.setting_cache.change_token_key)
            logger.info("Redis connection successful, change token present: {}", token is not None)
            return {"status": "success", "redis": "connected", "change_token": token}
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            return {"status": "error", "redis": "disconnected", "error": str(e)}

    logger.warning(f"Unknown health check route: {route_normalised}")
    return {"status": "error", "error": f"Unknown route: {route_normalised}"}
