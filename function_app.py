import json
import sys

import azure.functions as func
from loguru import logger

from src.config import SettingsManager
from src.api import (
    health as health_handler,
    get_setting as get_setting_handler,
    set_setting as set_setting_handler,
    reset_setting as reset_setting_handler,
    reload_settings as reload_settings_handler,
    setup as setup_handler,
)

logger.remove()
logger.add(sys.stderr, level=SettingsManager.get_instance().application.log_level)

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

STATUS_CODES = {
    "success": 200,
    "invalid": 400,
    "not_found": 404,
}


def _response(response: dict) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(response, default=str),
        status_code=STATUS_CODES.get(response.get("status"), 500),
        mimetype="application/json",
    )


def _invalid_json() -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps({"status": "error", "message": "Invalid JSON body"}),
        status_code=400,
        mimetype="application/json",
    )


@app.function_name(name="ping")
@app.route(route="ping", methods=[func.HttpMethod.GET])
async def ping(req: func.HttpRequest) -> func.HttpResponse:
    """Ping endpoint."""
    logger.info("HTTP trigger: ping")
    return func.HttpResponse("pong", status_code=200)


@app.function_name(name="health")
@app.route(route="health", methods=[func.HttpMethod.GET])
async def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check."""
    logger.info("HTTP trigger: health")

    response = await health_handler(route=req.params.get("route", None))
    return _response(response)


@app.function_name(name="settings_reload")
@app.route(route="settings/reload", methods=[func.HttpMethod.POST])
async def settings_reload(req: func.HttpRequest) -> func.HttpResponse:
    """Force a full settings reload in this worker."""
    logger.info("HTTP trigger: settings_reload")
    return _response(await reload_settings_handler())


@app.function_name(name="setting_get")
@app.route(route="settings/{name}", methods=[func.HttpMethod.GET])
async def setting_get(req: func.HttpRequest) -> func.HttpResponse:
    """Read one setting."""
    logger.info("HTTP trigger: setting_get")
    return _response(await get_setting_handler(name=req.route_params.get("name")))


@app.function_name(name="setting_set")
@app.route(route="settings/{name}", methods=[func.HttpMethod.PUT])
async def setting_set(req: func.HttpRequest) -> func.HttpResponse:
    """Write one setting."""
    logger.info("HTTP trigger: setting_set")

    try:
        req_body = req.get_json()
    except ValueError:
        return _invalid_json()

    if not isinstance(req_body, dict) or "value" not in req_body:
        return func.HttpResponse(
            json.dumps({"status": "error", "message": "Missing required parameter, value is required"}),
            status_code=400,
            mimetype="application/json",
        )

    response = await set_setting_handler(
        name=req.route_params.get("name"),
        value=req_body["value"],
    )
    return _response(response)


@app.function_name(name="setting_reset")
@app.route(route="settings/{name}/reset", methods=[func.HttpMethod.POST])
async def setting_reset(req: func.HttpRequest) -> func.HttpResponse:
    """Reset one setting to its initial value."""
    logger.info("HTTP trigger: setting_reset")

    force = False
    if req.get_body():
        try:
            force = bool(req.get_json().get("force", False))
        except (ValueError, AttributeError):
            return _invalid_json()

    response = await reset_setting_handler(
        name=req.route_params.get("name"),
        force=force,
    )
    return _response(response)


@app.function_name(name="setup")
@app.route(route="setup", methods=[func.HttpMethod.POST])
async def setup(req: func.HttpRequest) -> func.HttpResponse:
    """Create the schema and seed setting definitions."""
    logger.info("HTTP trigger: setup")

    try:
        req_body = req.get_json()
    except ValueError:
        return _invalid_json()

    response = await setup_handler(
        definitions=req_body.get("definitions", None),
    )
    return _response(response)
