from functools import lru_cache

from loguru import logger
from azure.keyvault.secrets import SecretClient
from azure.core.exceptions import ClientAuthenticationError, ResourceNotFoundError

from ..config import SettingsManager
from .azure_identity import get_credentials


@lru_cache(maxsize=4)
def get_secret_client(vault_url: str) -> SecretClient:
    """One SecretClient per vault, sharing the cached credential."""
    return SecretClient(vault_url=vault_url, credential=get_credentials())


def get_secret(secret_name: str, settings: SettingsManager | None = None) -> str:
    """Read a secret value, e.g. the Redis password, from Azure Key Vault.

    Raises:
        ValueError: if no Key Vault URL is configured
        ResourceNotFoundError: if the secret does not exist
        ClientAuthenticationError: if the credential is rejected
    """
    azure = (settings or SettingsManager.get_instance()).azure
    if not azure.key_vault_url:
        raise ValueError(f"Cannot resolve secret '{secret_name}': AZURE_KEY_VAULT_URL is not set")

    logger.debug("Retrieving secret from Key Vault: {}", secret_name)
    try:
        secret_value = get_secret_client(azure.key_vault_url).get_secret(secret_name).value
    except ResourceNotFoundError:
        logger.error("Secret not found in Key Vault: {}", secret_name)
        raise
    except ClientAuthenticationError as e:
        logger.error("Authentication failed when accessing Key Vault: {}", str(e))
        raise
    logger.debug("Successfully retrieved secret: {}", secret_name)
    return secret_value
