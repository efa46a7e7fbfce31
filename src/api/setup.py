import json

import dotenv
from loguru import logger

from ..database import (
    init_database,
    init_session_manager,
    SessionManager,
    verify_schema,
)
from ..setting import SettingError, init_setting_service

dotenv.load_dotenv()

SEED_FIELDS = ("state", "title", "area", "description", "options", "preferences", "frontend")


async def setup(
        definitions: list[dict] | None = None,
) -> dict:
    """Create missing tables and seed setting definitions that are not stored yet.

    Args:
        definitions: Setting definitions, each with a ``name`` and any of
            ``state``, ``title``, ``area``, ``description``, ``options``,
            ``preferences``, ``frontend``
    """
    logger.info("Setup invoked")
    session_manager: SessionManager = init_session_manager()

    # Verify schema before initialization (in case of missing tables, etc.)
    verification = verify_schema(session_manager)
    if verification["status"] != "ok":
        logger.warning("Schema verification: {}", json.dumps(verification, indent=2))

    logger.info("Creating missing tables... (if any)")
    init_database(session_manager)
    verification = verify_schema(session_manager)
    if verification["status"] != "ok":
        logger.warning("Schema verification after init: {}", json.dumps(verification, indent=2))
        return {"status": "error", "verification": verification}
    logger.info("Schema verification after init: OK")

    service = init_setting_service(session_manager=session_manager)

    seeded = []
    for definition in definitions or []:
        name = definition.get("name")
        if not name:
            return {"status": "error", "message": "Every setting definition needs a name"}
        fields = {key: definition[key] for key in SEED_FIELDS if key in definition}
        try:
            _, created = service.create_if_not_exists(name, **fields)
            if created:
                seeded.append(name)
        except SettingError as e:
            logger.error("Seeding setting {} failed: {}", name, e)
            return {"status": "error", "message": str(e), "seeded": seeded}

    logger.info("Seeded {} settings", len(seeded))
    return {"status": "success", "verification": verification, "seeded": seeded}
