"""Global configuration — loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings

from keyshift.types import ClientType


class KeyshiftSettings(BaseSettings):
    storage_backend: str = "sqlite"  # sqlite|json|memory
    db_path: Path = Path(".keyshift/state.db")
    data_file: Path = Path(".keyshift/data.json")
    client_type: ClientType = ClientType.CLI
    log_level: str = "INFO"

    model_config = {"env_prefix": "KEYSHIFT_"}


settings = KeyshiftSettings()
