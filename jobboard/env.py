import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/jobs.db"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    query_timeout: float = 30.0
    max_retries: int = 0


def _number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Read JOBBOARD_* variables into a Settings value."""
    log_dir = os.getenv("JOBBOARD_LOG_DIR")
    log_level = (os.getenv("JOBBOARD_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"JOBBOARD_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")
    max_retries = _number("JOBBOARD_MAX_RETRIES", 0, int)
    if max_retries < 0:
        raise ValueError("JOBBOARD_MAX_RETRIES must be >= 0")
    return Settings(
        database_url=os.getenv("JOBBOARD_DATABASE_URL") or DEFAULT_DATABASE_URL,
        log_level=log_level,
        log_dir=Path(log_dir) if log_dir else None,
        query_timeout=_number("JOBBOARD_QUERY_TIMEOUT", 30.0, float),
        max_retries=max_retries,
    )
