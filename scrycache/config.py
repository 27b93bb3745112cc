from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_prefix="SCRYCACHE_", env_file=".env")

    app_name: str = "scrycache"
    debug: bool = False

    # Empty db_path keeps the cache in memory for the lifetime of the process
    database_url: str = MEMORY_DATABASE_URL
    db_path: str = ""

    scryfall_api_url: str = "https://api.scryfall.com"
    user_agent: str = "scrycache/1.0"
    accept: str = "application/json;q=0.9,*/*;q=0.8"
    proxy_url: str | None = None

    request_timeout: float = 30.0

    # Scryfall asks for 50-100ms between requests
    rate_limit_delay: float = 0.1

    def resolved_database_url(self) -> str:
        """
        Effective database URL.

        A configured db_path wins over database_url. Missing parent
        directories of the file are created.
        """
        if not self.db_path:
            return self.database_url

        path = Path(self.db_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{path}"


settings = Settings()
