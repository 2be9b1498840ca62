from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from config.path import PATHS


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    sleep_sec: float = 0.5

    window_title: str = "Heroes of the Storm"

    ban_match_threshold: float = 0.15
    ban_compare_size: Tuple[int, int] = (30, 30)
    lock_border_threshold: int = 200
    lock_border_sample: Tuple[int, int] = (5, 5)
    max_workers: int = 6

    ocr_lang: str = "eng"

    bans_builtin_dir: Path = PATHS.BANS_BUILTIN_DIR
    bans_user_dir: Path = PATHS.BANS_USER_DIR
    game_data_file: Path = PATHS.GAME_DATA_FILE
    corrections_file: Path = PATHS.USER_CORRECTIONS_FILE

    debug: bool = False
    debug_save: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Defaults overridden by HOTS_* variables (a .env file is honoured)."""
        load_dotenv()
        d = cls()
        return cls(
            sleep_sec=float(os.getenv("HOTS_SLEEP_SEC", d.sleep_sec)),
            window_title=os.getenv("HOTS_WINDOW_TITLE", d.window_title),
            ban_match_threshold=float(os.getenv("HOTS_BAN_MATCH_THRESHOLD", d.ban_match_threshold)),
            lock_border_threshold=int(os.getenv("HOTS_LOCK_BORDER_THRESHOLD", d.lock_border_threshold)),
            max_workers=int(os.getenv("HOTS_MAX_WORKERS", d.max_workers)),
            ocr_lang=os.getenv("HOTS_OCR_LANG", d.ocr_lang),
            bans_builtin_dir=Path(os.getenv("HOTS_BANS_BUILTIN_DIR", str(d.bans_builtin_dir))),
            bans_user_dir=Path(os.getenv("HOTS_BANS_USER_DIR", str(d.bans_user_dir))),
            game_data_file=Path(os.getenv("HOTS_GAME_DATA_FILE", str(d.game_data_file))),
            corrections_file=Path(os.getenv("HOTS_CORRECTIONS_FILE", str(d.corrections_file))),
            debug=_env_bool("HOTS_DEBUG", d.debug),
            debug_save=_env_bool("HOTS_DEBUG_SAVE", d.debug_save),
        )
