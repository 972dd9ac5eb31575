from __future__ import annotations
from pathlib import Path
import os


APP_ROOT = Path(__file__).resolve().parent.parent
_BASE_DATA_DIR = APP_ROOT / "_data"


def _resolve_data_dir() -> Path:
    override = os.environ.get("STELLAR_APP_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return _BASE_DATA_DIR


DATA_DIR = _resolve_data_dir()
LOG_DIR = DATA_DIR / "logs"

for d in (DATA_DIR, LOG_DIR):
    d.mkdir(parents=True, exist_ok=True)

SETTINGS_FILE = DATA_DIR / "settings.json"
