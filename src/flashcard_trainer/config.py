"""
# Configuration Management Module

Application settings for the Flashcard Trainer API and its study client, built on
**Pydantic Settings**.

## Loading Hierarchy

Higher layers override lower layers:

1.  **Environment variables** (highest priority)
2.  **`FLASHCARD_TRAINER_CONFIG_PATH`**: custom config file path from the environment
3.  **`.env` file** in the project root
4.  **Default values** declared on `Settings` (lowest priority)

If no configuration file is found the application runs in environment-only mode.

## Configuration Groups

| Group | Settings |
|-------|----------|
| **Server** | `HOST`, `PORT`, `DEBUG`, `CORS_ORIGINS` |
| **Database (MongoDB)** | `MONGODB_URL`, `MONGODB_DATABASE`, timeouts, optional credentials |
| **Collections** | `FLASHCARDS_COLLECTION`, `CATEGORIES_COLLECTION` |
| **Flashcards** | `DEFAULT_CATEGORY`, `BULK_DELIMITER` |
| **Logging** | `LOG_LEVEL` |
| **Client** | `API_BASE_URL` |

## Usage

```python
from flashcard_trainer.config import settings

print(settings.MONGODB_DATABASE)  # "fiszki"
```
"""

import os
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "FLASHCARD_TRAINER_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path.

    Checks, in order, the `FLASHCARD_TRAINER_CONFIG_PATH` environment variable and the
    `.env` file in the project root. Returns `None` when neither exists, which leaves the
    settings to environment variables and defaults.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=False)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    **Configuration Groups:**
    *   **Server**: Host, port, debug mode and allowed CORS origins.
    *   **Database**: MongoDB connection details and collection names.
    *   **Flashcards**: Default category and the bulk-entry delimiter.
    *   **Client**: Base URL the study CLI talks to.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 5001
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:3000"  # Comma-separated allowed origins

    # MongoDB configuration
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "fiszki"
    MONGODB_CONNECTION_TIMEOUT: int = 10000
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000

    # Authentication (optional)
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[SecretStr] = None

    # Collections
    FLASHCARDS_COLLECTION: str = "flashcard"
    CATEGORIES_COLLECTION: str = "categories"

    # Flashcards
    DEFAULT_CATEGORY: str = "default"
    BULK_DELIMITER: str = ";"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Study client
    API_BASE_URL: str = "http://localhost:5001"

    @field_validator("MONGODB_URL", mode="before")
    @classmethod
    def no_empty_urls(cls, v: Any, info: Any) -> Any:
        """
        Validates that the MongoDB URL is not empty.

        Raises:
            ValueError: If the URL is empty or whitespace.
        """
        if not v or not str(v).strip():
            raise ValueError(f"{info.field_name} must be set via environment or .env and not empty!")
        return v

    @field_validator("BULK_DELIMITER", mode="before")
    @classmethod
    def non_blank_delimiter(cls, v: Any, info: Any) -> Any:
        if v is None or str(v) == "" or str(v) == "\n":
            raise ValueError(f"{info.field_name} must be a non-empty, single-line separator")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return str(v).upper() if v else "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse the comma-separated `CORS_ORIGINS` into a list of origins."""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings: Settings = Settings()
