"""Application configuration loaded from .env and defaults."""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    db_path: Path = PROJECT_ROOT / "data" / "readshelf.db"
    web_host: str = "127.0.0.1"
    web_port: int = 8787
    log_path: Path = PROJECT_ROOT / "data" / "logs" / "app.log"
    log_level: str = "INFO"
    rules_path: Optional[Path] = None
    suggestion_min_articles: int = 3
    suggestion_min_purity: float = 0.7
    suggestion_limit: int = 5
    fetch_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def data_dir(self) -> Path:
        return self.db_path.parent

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"


def get_settings() -> Settings:
    return Settings()
