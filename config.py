"""Configuration and logging setup."""
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

APP_DIR = Path(__file__).resolve().parent
DEFAULT_DATABASE_URL = "sqlite:///./thumbnails.db"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings:
    """Runtime settings. Only the database location comes from the environment."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        image_dir: Optional[Path] = None,
        templates_dir: Optional[Path] = None,
        static_dir: Optional[Path] = None,
        thumb_size: Tuple[int, int] = (100, 100),
        log_level: str = "INFO",
    ):
        self.database_url = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.image_dir = Path(image_dir) if image_dir else APP_DIR / "images"
        self.templates_dir = Path(templates_dir) if templates_dir else APP_DIR / "templates"
        self.static_dir = Path(static_dir) if static_dir else APP_DIR / "static"
        self.thumb_size = thumb_size
        self.log_level = log_level


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stderr at `level`, also when run by `uvicorn app:app`."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
