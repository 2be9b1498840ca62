# pipeline/player.py
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from PIL import Image

if TYPE_CHECKING:
    from pipeline.team import Team

RecentPicks = Dict[str, List[Tuple[str, int]]]


class Player:
    """
    One roster slot of a team.

    Locked picks and final names are terminal: once set, detection can no
    longer overwrite them. Every setter returns True only if something changed,
    and reports the change to the owning team.
    """

    def __init__(self, index: int, team: "Team"):
        self.index = index
        self.team = team

        self.name: Optional[str] = None
        self.name_final = False
        self.character: Optional[str] = None
        self.character_unknown = False
        self.locked = False
        self.recent_picks: Optional[RecentPicks] = None

        # Last crops used for OCR (debug views)
        self.image_hero_name: Optional[Image.Image] = None
        self.image_player_name: Optional[Image.Image] = None

        self._lock = threading.Lock()

    def set_name(self, name: str, final: bool) -> bool:
        with self._lock:
            if self.name_final:
                return False
            if name == self.name and final == self.name_final:
                return False

            self.name = name
            self.name_final = final

        self.team.notify_player_changed(self)
        return True

    def set_pick(self, character: Optional[str], unknown: bool, locked: bool) -> bool:
        # character/unknown/locked come from one sample and change together
        with self._lock:
            if self.locked:
                return False
            if (character, unknown, locked) == (self.character, self.character_unknown, self.locked):
                return False

            self.character = character
            self.character_unknown = unknown
            self.locked = locked

        self.team.notify_player_changed(self)
        return True

    def set_recent_picks(self, recent_picks: RecentPicks) -> bool:
        with self._lock:
            if recent_picks == self.recent_picks:
                return False
            self.recent_picks = recent_picks

        self.team.notify_player_changed(self)
        return True

    def set_image_hero_name(self, image: Optional[Image.Image]) -> None:
        self.image_hero_name = image

    def set_image_player_name(self, image: Optional[Image.Image]) -> None:
        self.image_player_name = image

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "team": self.team.color.value,
            "name": self.name,
            "nameFinal": self.name_final,
            "character": self.character,
            "characterUnknown": self.character_unknown,
            "locked": self.locked,
            "recentPicks": (
                {tag: [list(p) for p in picks] for tag, picks in self.recent_picks.items()}
                if self.recent_picks is not None
                else None
            ),
        }

    def __repr__(self) -> str:
        return (
            f"Player({self.team.color.value}#{self.index} name={self.name!r}"
            f"{'!' if self.name_final else ''} hero={self.character!r}"
            f"{' locked' if self.locked else ''})"
        )
