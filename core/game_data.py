# core/game_data.py
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Tuple

from rapidfuzz import fuzz, process

from pipeline.normalizer import TextNormalizer

if TYPE_CHECKING:
    from pipeline.player import Player

logger = logging.getLogger(__name__)

FUZZY_CUTOFF = 86.0
# OCR fragments ("TEMPLE", "OF") must never stand in for a whole name
MIN_LENGTH_RATIO = 0.8


def _norm_key(s: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", (s or "").upper())


class NameService(Protocol):
    def correct_hero_name(self, raw: str) -> str: ...

    def fix_map_name(self, raw: str) -> str: ...

    def hero_exists(self, name: str) -> bool: ...

    def map_exists(self, name: str) -> bool: ...

    def get_hero_name(self, hero_id: Optional[str]) -> Optional[str]: ...

    def update_player_recent_picks(self, player: "Player") -> None: ...


class GameData:
    """
    Hero/map dictionary used to turn noisy OCR into canonical values.

    Heroes resolve to their id ("tyrael"), maps to their display name
    ("Sky Temple"). Unresolvable text comes back cleaned but unchanged so the
    caller can flag it as unknown.
    """

    def __init__(
        self,
        heroes: Optional[Dict[str, str]] = None,
        maps: Optional[List[str]] = None,
        corrections: Optional[Dict[str, str]] = None,
        battletags: Optional[Dict[str, List[str]]] = None,
        picks: Optional[Dict[str, List[Tuple[str, int]]]] = None,
        *,
        fuzzy_cutoff: float = FUZZY_CUTOFF,
    ):
        self.heroes: Dict[str, str] = dict(heroes or {})  # id -> display name
        self.maps: List[str] = list(maps or [])
        self.corrections: Dict[str, str] = {}
        self.learned_corrections: Dict[str, str] = {}  # persisted per user
        self.battletags: Dict[str, List[str]] = dict(battletags or {})
        self.picks: Dict[str, List[Tuple[str, int]]] = {
            tag: [(str(h), int(c)) for h, c in rows] for tag, rows in (picks or {}).items()
        }
        self.fuzzy_cutoff = fuzzy_cutoff
        self.normalizer = TextNormalizer()

        self._hero_ids_by_key = {_norm_key(name): hero_id for hero_id, name in self.heroes.items()}
        self._hero_ids_by_key.update({_norm_key(hero_id): hero_id for hero_id in self.heroes})
        self._maps_by_key = {_norm_key(m): m for m in self.maps}

        for raw, hero_id in (corrections or {}).items():
            self.add_hero_correction(raw, hero_id)

    @classmethod
    def from_file(cls, path: Path, corrections_file: Optional[Path] = None, **kwargs) -> "GameData":
        if not path.exists():
            logger.warning(f"Game data not found at {path}, hero/map names will not resolve")
            game_data = cls(**kwargs)
        else:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)

            game_data = cls(
                heroes=data.get("heroes") or {},
                maps=data.get("maps") or [],
                corrections=data.get("corrections") or {},
                battletags=data.get("battletags") or {},
                picks=data.get("picks") or {},
                **kwargs,
            )

        if corrections_file is not None and corrections_file.exists():
            game_data.load_corrections(corrections_file)
        return game_data

    # ----------------------
    # Heroes
    # ----------------------
    def add_hero_correction(self, raw: str, hero_id: str) -> str:
        if hero_id not in self.heroes:
            raise KeyError(f"unknown hero id: {hero_id}")
        key = self.normalizer.normalize(raw)
        if not key:
            raise ValueError(f"nothing left of '{raw}' to correct")
        self.corrections[key] = hero_id
        return key

    def learn_hero_correction(self, raw: str, hero_id: str) -> None:
        """Like add_hero_correction, but kept for save_corrections()."""
        key = self.add_hero_correction(raw, hero_id)
        self.learned_corrections[key] = hero_id
        logger.info(f"Learned hero correction '{key}' -> '{hero_id}'")

    def load_corrections(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        for raw, hero_id in (data.get("corrections") or {}).items():
            try:
                self.learn_hero_correction(raw, hero_id)
            except (KeyError, ValueError) as e:
                logger.warning(f"Ignoring stored correction '{raw}': {e}")

    def save_corrections(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"corrections": dict(sorted(self.learned_corrections.items()))}
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def correct_hero_name(self, raw: str) -> str:
        text = self.normalizer.normalize(raw)
        if not text:
            return ""

        if text in self.corrections:
            return self.corrections[text]

        hero_id = self._hero_ids_by_key.get(_norm_key(text))
        if hero_id is not None:
            return hero_id

        return self._fuzzy(text, self.heroes) or text

    def hero_exists(self, name: str) -> bool:
        return bool(name) and (name in self.heroes or _norm_key(name) in self._hero_ids_by_key)

    def get_hero_name(self, hero_id: Optional[str]) -> Optional[str]:
        """Display name for a hero id; anything unknown is returned as is."""
        if hero_id is None:
            return None
        return self.heroes.get(hero_id, hero_id)

    # ----------------------
    # Maps
    # ----------------------
    def fix_map_name(self, raw: str) -> str:
        text = self.normalizer.normalize(raw)
        if not text:
            return ""

        exact = self._maps_by_key.get(_norm_key(text))
        if exact is not None:
            return exact

        choices = {m: m for m in self.maps}
        return self._fuzzy(text, choices) or text

    def map_exists(self, name: str) -> bool:
        return bool(name) and _norm_key(name) in self._maps_by_key

    # ----------------------
    # Players
    # ----------------------
    def update_player_recent_picks(self, player: "Player") -> None:
        tags = self.battletags.get(player.name or "")
        if not tags:
            logger.debug(f"No battletags known for player '{player.name}'")
            return

        recent = {tag: list(self.picks.get(tag, [])) for tag in tags}
        player.set_recent_picks(recent)

    def _fuzzy(self, text: str, choices: Dict[str, str]) -> Optional[str]:
        """
        Whole-string match only: fuzz.ratio over the normalised keys, similar
        lengths, and a single best candidate. Anything else stays unresolved.
        """
        query = _norm_key(text)
        if not query or not choices:
            return None

        hits = [
            (key, score)
            for value, score, key in process.extract(
                query,
                choices,
                scorer=fuzz.ratio,
                processor=_norm_key,
                score_cutoff=self.fuzzy_cutoff,
                limit=None,
            )
            if _similar_length(query, _norm_key(value))
        ]
        if not hits:
            return None

        hits.sort(key=lambda h: h[1], reverse=True)
        if len(hits) > 1 and hits[0][1] == hits[1][1]:
            logger.debug(f"Fuzzy '{text}' is ambiguous: {hits[0][0]} / {hits[1][0]}")
            return None

        key, score = hits[0]
        logger.debug(f"Fuzzy '{text}' -> '{key}' ({score:.1f})")
        return key


def _similar_length(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return min(len(a), len(b)) / max(len(a), len(b)) >= MIN_LENGTH_RATIO
