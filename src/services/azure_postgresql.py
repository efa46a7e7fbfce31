from urllib.parse import quote_plus

from ..config import SettingsManager
from .azure_identity import get_access_token

AZURE_PG_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"


def get_connection_string(settings: SettingsManager | None = None) -> str:
    """PostgreSQL URL authenticated with an Azure AD access token."""
    database = (settings or SettingsManager.get_instance()).database
    password = quote_plus(get_access_token(AZURE_PG_SCOPE))

    return (
        f"postgresql+psycopg2://{quote_plus(database.username)}:{password}"
        f"@{database.host}:{database.port}/{database.name}"
        f"?options=-c%20search_path%3D{database.schema}" # psycopg2 URL-encoded
        "&sslmode=require" # Azure requires SSL
    )
