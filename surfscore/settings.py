"""Runtime settings from environment variables or a project .env file."""

import os
from pathlib import Path
from typing import Optional


def _read_env_file(name: str) -> Optional[str]:
    """Look up a KEY=value line in the project .env file."""
    env_paths = [
        Path(__file__).parent.parent / ".env",
        Path.cwd() / ".env",
    ]
    for env_path in env_paths:
        if not env_path.exists():
            continue
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line.startswith(f"{name}="):
                    return line.split("=", 1)[1].strip()
    return None


def get_setting(name: str, default: str) -> str:
    """Get a setting, checking the environment first, then .env."""
    value = os.environ.get(name)
    if value:
        return value
    return _read_env_file(name) or default


def get_int_setting(name: str, default: int) -> int:
    value = get_setting(name, str(default))
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def get_cache_dir() -> Path:
    """Directory for the SQLite response caches. Defaults to ~/.cache/surfscore."""
    cache_dir = Path(get_setting("SURFSCORE_CACHE_DIR", str(Path.home() / ".cache" / "surfscore")))
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


FORECAST_DAYS = get_int_setting("SURFSCORE_FORECAST_DAYS", 7)
FORECAST_HOUR = get_int_setting("SURFSCORE_FORECAST_HOUR", 8)  # local hour sampled per day
BATCH_SIZE = get_int_setting("SURFSCORE_BATCH_SIZE", 5)
HTTP_TIMEOUT = get_int_setting("SURFSCORE_HTTP_TIMEOUT", 15)
