from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Protocol

from PIL import Image

from config.path import PATHS
from pipeline.draft import FrameProvider

logger = logging.getLogger(__name__)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp"}


class Grabber(Protocol):
    def grab(self) -> Optional[Image.Image]: ...


def window_frame_provider(window: Grabber, debug_save: bool = False) -> FrameProvider:
    def provide() -> Optional[Image.Image]:
        frame_img = window.grab()
        if frame_img is None:
            logger.warning("Game window not found / not capturable")
            return None

        if debug_save:
            PATHS.CAPTURE_DIR.mkdir(parents=True, exist_ok=True)
            frame_img.save(PATHS.HOTS_CLIENT_CAPTURE_PNG)
        return frame_img

    return provide


def list_images(folder: Path) -> list[Path]:
    paths = [p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTS]
    return sorted(paths, key=lambda p: p.name)


def open_rgb(path: Path) -> Image.Image:
    with Image.open(path) as img:
        return img.convert("RGB")


class FolderFrames:
    """Replays screenshots in file name order, one per cycle."""

    def __init__(self, paths: Iterable[Path]):
        self._paths: Iterator[Path] = iter(paths)
        self.current: Optional[Path] = None

    def __call__(self) -> Optional[Image.Image]:
        try:
            self.current = next(self._paths)
        except StopIteration:
            self.current = None
            return None
        return open_rgb(self.current)


def save_player_crops(players: Iterable, directory: Path) -> list[Path]:
    """Write the last hero/player name crops of each player for inspection."""
    directory.mkdir(parents=True, exist_ok=True)
    saved = []
    for p in players:
        for label, img in (("hero", p.image_hero_name), ("name", p.image_player_name)):
            if img is None:
                continue
            path = directory / f"{p.team.color.value}_{p.index}_{label}.png"
            img.save(path)
            saved.append(path)
    return saved
