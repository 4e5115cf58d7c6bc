"""
Azure-specific configuration loading.

Azure Functions exposes app settings (including Key Vault references such as
@Microsoft.KeyVault(SecretUri=...)) as plain environment variables, so the
Cosmos DB connection string is read from the app setting named by
`Settings.connection_setting` - the same name the trigger binding uses.
"""
import os
from functools import lru_cache

from shared.config import Settings


@lru_cache()
def get_settings() -> Settings:
    """Load settings from environment variables / .env."""
    return Settings()


def get_connection_string(settings: Settings) -> str:
    """Resolve the Cosmos DB connection string from its app setting."""
    value = os.environ.get(settings.connection_setting, '')
    if not value:
        raise RuntimeError(
            f"App setting '{settings.connection_setting}' is not set; "
            "expected a Cosmos DB connection string"
        )
    return value
