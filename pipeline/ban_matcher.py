# pipeline/ban_matcher.py
from __future__ import annotations

import base64
import io
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from core.errors import BanIndexError

logger = logging.getLogger(__name__)

HASH_BITS = 64
MATCH_THRESHOLD = 0.15
COMPARE_SIZE = (30, 30)


@dataclass(frozen=True)
class BanMatch:
    hero_id: str
    distance: float  # 0..1, share of differing hash bits


# ======================
# Hashing
# ======================
def compute_phash(img: Image.Image) -> np.ndarray:
    """64-bit DCT perceptual hash, packed into uint8[8]."""
    gray = cv2.cvtColor(np.asarray(img.convert("RGB"), dtype=np.uint8), cv2.COLOR_RGB2GRAY)
    gray = cv2.resize(gray, (32, 32), interpolation=cv2.INTER_AREA)
    dct = cv2.dct(gray.astype(np.float32))
    low = dct[:8, :8]
    med = np.median(low[1:, 1:])
    bits = (low >= med).astype(np.uint8).flatten()
    return np.packbits(bits)


def hash_distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.unpackbits(np.bitwise_xor(a, b)).sum()) / HASH_BITS


# ======================
# Matcher
# ======================
class BanImageMatcher:
    """
    hero_id -> pHash of its ban icon.

    Built-in icons load first, then user-learned ones; an id that is already
    indexed is never replaced. load() runs at most once per instance; after
    that the index only grows through learn().
    """

    def __init__(
        self,
        builtin_dir: Optional[Path],
        user_dir: Optional[Path],
        *,
        threshold: float = MATCH_THRESHOLD,
        compare_size: Tuple[int, int] = COMPARE_SIZE,
    ):
        self.builtin_dir = builtin_dir
        self.user_dir = user_dir
        self.threshold = threshold
        self.compare_size = compare_size

        self.index: Dict[str, np.ndarray] = {}
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        with self._lock:
            if self._loaded:
                return
            self._loaded = True

            for directory in (self.builtin_dir, self.user_dir):
                if directory is None:
                    continue
                try:
                    self._load_dir(directory)
                except BanIndexError as e:
                    logger.error(f"Ban icon index incomplete: {e}")
                    break

            logger.info(f"Ban icon index ready: {len(self.index)} heroes")

    def _load_dir(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
            files = sorted(p for p in directory.iterdir() if p.suffix.lower() == ".png")
        except OSError as e:
            raise BanIndexError(f"unable to scan directory {directory}: {e}") from e

        for p in files:
            hero_id = p.stem
            if hero_id in self.index:
                continue
            try:
                with Image.open(p) as img:
                    self.index[hero_id] = self._hash(img)
            except (OSError, UnidentifiedImageError) as e:
                logger.warning(f"Skipping unreadable ban icon {p.name}: {e}")

    def _hash(self, img: Image.Image) -> np.ndarray:
        return compute_phash(img.convert("RGB").resize(self.compare_size, Image.Resampling.BILINEAR))

    # ----------------------
    # Classification
    # ----------------------
    def classify(self, image: Image.Image) -> Optional[BanMatch]:
        return self.match_hash(self._hash(image))

    def match_hash(self, candidate: np.ndarray) -> Optional[BanMatch]:
        """
        Nearest indexed hero, accepted only strictly below the threshold.
        Equal distances keep the first hero in index order.
        """
        best: Optional[BanMatch] = None
        for hero_id, ref in self.index.items():
            d = hash_distance(candidate, ref)
            if best is None or d < best.distance:
                best = BanMatch(hero_id=hero_id, distance=d)

        if best is None or best.distance >= self.threshold:
            return None
        return best

    # ----------------------
    # Manual labelling
    # ----------------------
    def learn(self, hero_id: str, image: Image.Image) -> bool:
        """Persist a user-labelled icon as <hero_id>.png and index it."""
        with self._lock:
            if hero_id in self.index:
                return False

            if self.user_dir is not None:
                self.user_dir.mkdir(parents=True, exist_ok=True)
                image.save(self.user_dir / f"{hero_id}.png")

            self.index[hero_id] = self._hash(image)

        logger.info(f"Learned ban icon for '{hero_id}'")
        return True

    def learn_from_base64(self, hero_id: str, data: str) -> bool:
        """Accepts raw base64 or a data URI (data:image/png;base64,...)."""
        marker = "base64,"
        if marker in data:
            data = data[data.index(marker) + len(marker):]

        with Image.open(io.BytesIO(base64.b64decode(data))) as img:
            img.load()
            return self.learn(hero_id, img.convert("RGB"))
