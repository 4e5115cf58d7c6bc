"""
Base configuration model for the Entities function app.
Provider-specific config loading is handled by each provider.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Document store
    database_name: str = "entities_db"
    container_name: str = "entities"
    lease_container_name: str = "leases"
    connection_setting: str = "cosmosDBConnection"  # Name of the app setting holding the connection string

    # Change feed polling (local watcher only; the Functions trigger is push-based)
    change_feed_poll_seconds: float = 1.0

    # App settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
