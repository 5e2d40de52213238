import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "ytrss-cli"

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    base_url: str = "http://ytrss.xyz/api/v1"
    request_timeout: float = 20.0

    # Delay between item-status polls while a job is still processing.
    poll_interval: float = 3.0

    check_for_updates: bool = True


def config_dir() -> Path:
    cfg_dir = Path(user_config_dir(APP_NAME))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir


def config_path() -> Path:
    return config_dir() / "config.json"


def _apply_env(settings: Settings) -> Settings:
    base_url = (os.environ.get("YTRSS_BASE_URL") or "").strip()
    if base_url:
        settings.base_url = base_url.rstrip("/")
    if (os.environ.get("YTRSS_NO_UPDATE") or "").strip():
        settings.check_for_updates = False
    return settings


def load_settings(path: Path | None = None) -> Settings:
    path = path or config_path()
    if not path.exists():
        return _apply_env(Settings())
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        settings = Settings(**{k: v for k, v in raw.items() if k in Settings.__annotations__})
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        settings = Settings()
    return _apply_env(settings)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    path = path or config_path()
    path.write_text(json.dumps(asdict(settings), indent=2) + "\n", encoding="utf-8")
