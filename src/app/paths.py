"""Path utilities for ensuring directories exist."""
from src.app.config import get_settings


def ensure_dirs() -> None:
    settings = get_settings()
    dirs = [settings.data_dir, settings.log_path.parent]
    if settings.rules_path is not None:
        dirs.append(settings.rules_path.parent)
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)
