from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from the environment or a local .env file."""

    input_dir: Path = Path('./Input')
    output_dir: Path = Path('./Output')
    log_level: str = 'INFO'
    # None lets ThreadPoolExecutor pick its own default
    max_workers: Optional[int] = None

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )


settings = Settings()

INPUT_DIR = settings.input_dir
OUTPUT_DIR = settings.output_dir
LOG_LEVEL = settings.log_level.upper()
MAX_WORKERS = settings.max_workers

WATCH_SUFFIX = '.bmp'
KEEP_ALIVE_INTERVAL = 1

CANNY_LOW_THRESHOLD = 100
CANNY_HIGH_THRESHOLD = 200

GRAY_FILENAME = 'gray.png'
RESIZED_FILENAME = 'resized.png'
EDGES_FILENAME = 'edges.png'
METADATA_FILENAME = 'metadata.json'
