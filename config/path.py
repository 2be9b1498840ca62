# config/path.py
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
USER_HOME = Path.home() / ".hots-draft"


@dataclass(frozen=True)
class Paths:
    DATA_DIR: Path = PROJECT_ROOT / "data"
    BANS_BUILTIN_DIR: Path = DATA_DIR / "bans"
    GAME_DATA_FILE: Path = DATA_DIR / "game_data.json"

    USER_DIR: Path = USER_HOME
    BANS_USER_DIR: Path = USER_DIR / "data" / "bans"
    USER_CORRECTIONS_FILE: Path = USER_DIR / "corrections.json"

    CAPTURE_DIR: Path = PROJECT_ROOT / "captured_images"
    HOTS_CLIENT_CAPTURE_PNG: Path = CAPTURE_DIR / "hots_client_capture.png"
    DEBUG_REGIONS_DIR: Path = CAPTURE_DIR / "regions"


PATHS = Paths()
