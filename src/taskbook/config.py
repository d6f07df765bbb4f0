"""Configuration management for Taskbook."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TASKBOOK_HOME = Path(os.environ.get("TASKBOOK_HOME", Path.home() / "taskbook"))
CONFIG_FILE = TASKBOOK_HOME / "config" / "taskbook.conf"
DATA_DIR = TASKBOOK_HOME / "data"


@dataclass
class Config:
    """Taskbook configuration."""

    data_dir: str = ""
    due_soon_minutes: int = 60
    default_categories: list[str] = field(default_factory=lambda: ["Personal", "Work", "Urgent"])
    seed_sample_tasks: bool = True

    def resolved_data_dir(self) -> Path:
        """Application-private storage directory."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from taskbook.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "due_soon_minutes":
                try:
                    config.due_soon_minutes = int(value)
                except ValueError:
                    logger.warning(f"Ignoring invalid DUE_SOON_MINUTES: {value!r}")
            case "default_categories":
                names = [c.strip() for c in value.split(",") if c.strip()]
                if names:
                    config.default_categories = names
            case "seed_sample_tasks":
                config.seed_sample_tasks = _parse_bool(value)

    return config
