import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def get_default_data_dir() -> str:
    """
    Determine where saved games live.
    CONQUEST_DATA_DIR wins, then ./data when run from the project root, then a temp directory.
    """
    if data_dir := os.getenv('CONQUEST_DATA_DIR'):
        return data_dir

    current_dir = Path.cwd()
    if (current_dir / 'src').exists():
        return str(current_dir / 'data')

    return str(Path(tempfile.gettempdir()) / 'conquest_data')


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


@dataclass
class Settings:
    data_dir: str
    log_level: str = "INFO"
    log_file: Optional[str] = None
    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            data_dir=get_default_data_dir(),
            log_level=os.getenv('CONQUEST_LOG_LEVEL', 'INFO').upper(),
            log_file=os.getenv('CONQUEST_LOG_FILE') or None,
            seed=_optional_int(os.getenv('CONQUEST_SEED')),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
