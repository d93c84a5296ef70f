"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Command line flags override these values, see ``gwiki.cli``.
    """

    data_dir: Path = Path("files")
    log_limit: int = 5
    app_title: str = "g-wiki"
    local: str = ""
    http: str = ":8000"
    debug: bool = False
    git_binary: str = "git"
    git_email: str = "system@g-wiki"

    model_config = SettingsConfigDict(
        env_prefix="GWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def address(self) -> str:
        """Listen address; ``local`` wins over ``http``."""
        return self.local or self.http
