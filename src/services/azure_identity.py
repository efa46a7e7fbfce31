from functools import lru_cache
from loguru import logger

from azure.identity import DefaultAzureCredential


@lru_cache(maxsize=1)
def get_credentials() -> DefaultAzureCredential:
    """Get or create a cached DefaultAzureCredential instance.

    Enables CLI and managed identity authentication, suitable for both
    local development and Azure-hosted environments.
    """
    logger.debug("Initializing Azure DefaultAzureCredential")
    return DefaultAzureCredential(
        exclude_cli_credential=False,  # allow CLI auth
        exclude_managed_identity_credential=False,  # allow MSI auth
        exclude_interactive_browser_credential=True,
        exclude_visual_studio_code_credential=True,
        exclude_shared_token_cache_credential=True,
        exclude_environment_credential=True,
        exclude_powershell_credential=True,
        exclude_developer_cli_credential=True,
    )


def get_access_token(scope: str) -> str:
    """Fetch a bearer token for ``scope`` with the shared credential."""
    return get_credentials().get_token(scope).token
