"""Logging setup shared by the CLI and the web server."""
import logging

from src.app.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Install console and file handlers on the ``readshelf`` logger tree."""
    settings = get_settings()
    settings.log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("readshelf")
    root.setLevel(settings.log_level.upper())

    # Re-running setup (e.g. uvicorn reload) must not stack handlers
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    file_handler = logging.FileHandler(settings.log_path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
