from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "EDHGuard"
    debug: bool = False

    # SQLite file holding the card catalog
    catalog_path: Path = Path("data/cards.db")

    # Default deck-construction variant for validation
    default_format: str = "standard-commander"


settings = Settings()


# =============================================================================
# BULK IMPORT TUNING
# =============================================================================

# Sources at or above this size are parsed incrementally instead of loaded whole
STREAMING_THRESHOLD_BYTES = 100 * 1024 * 1024

# Records written per catalog transaction during import
IMPORT_BATCH_SIZE = 500

# Log a progress line every N processed records
PROGRESS_INTERVAL = 1000

# Request a garbage collection every N processed records (streaming only)
GC_INTERVAL = 5000
