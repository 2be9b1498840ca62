# pipeline/team.py
from __future__ import annotations

import base64
import logging
import threading
from typing import Any, Dict, List, Optional

from core.draft_schema import BAN_SLOTS, PLAYER_SLOTS, TeamColor
from pipeline.events import BanChanged, DraftEvent, EventBus, PlayerChanged
from pipeline.player import Player

logger = logging.getLogger(__name__)


class Team:
    """
    Bans and roster of one side.

    Ban slots below `bans_locked` are final. The watermark only ever grows
    for the lifetime of the instance; a new draft gets a new Team.
    """

    def __init__(self, color: TeamColor, events: Optional[EventBus] = None):
        self.color = color
        self.bans: List[Optional[str]] = [None] * BAN_SLOTS
        self.bans_locked = 0
        self.ban_images: List[Optional[bytes]] = [None] * BAN_SLOTS
        self.players: List[Player] = [Player(i, self) for i in range(PLAYER_SLOTS)]

        self._events = events
        self._lock = threading.Lock()

    # ----------------------
    # Bans
    # ----------------------
    def add_ban(self, index: int, hero: Optional[str]) -> bool:
        with self._lock:
            if index < self.bans_locked:
                logger.debug(f"Ban #{index + 1} {self.color.value}: rejected '{hero}' (locked)")
                return False
            if self.bans[index] == hero:
                return False
            self.bans[index] = hero

        self._emit_ban(index)
        return True

    def add_ban_image(self, index: int, image_data: Optional[bytes]) -> bool:
        with self._lock:
            if index < self.bans_locked:
                return False
            if self.ban_images[index] == image_data:
                return False
            self.ban_images[index] = image_data

        self._emit_ban(index)
        return True

    def set_bans_locked(self, bans_locked: int) -> bool:
        bans_locked = min(bans_locked, BAN_SLOTS)
        with self._lock:
            before = self.bans_locked
            if bans_locked <= before:
                return False
            self.bans_locked = bans_locked

        for i in range(before, bans_locked):
            self._emit_ban(i)
        return True

    def is_ban_locked(self, index: int) -> bool:
        return index < self.bans_locked

    # ----------------------
    # Players
    # ----------------------
    def player(self, index: int) -> Optional[Player]:
        if index is None or not 0 <= index < len(self.players):
            return None
        return self.players[index]

    def notify_player_changed(self, player: Player) -> None:
        self._emit(PlayerChanged(team=self.color, index=player.index, player=player.to_dict()))

    # ----------------------
    # Events
    # ----------------------
    def detach(self) -> None:
        """Stop forwarding events, used when the draft is replaced."""
        self._events = None

    def _emit_ban(self, index: int) -> None:
        self._emit(
            BanChanged(
                team=self.color,
                index=index,
                hero=self.bans[index],
                locked=self.is_ban_locked(index),
            )
        )

    def _emit(self, event: DraftEvent) -> None:
        if self._events is not None:
            self._events.emit(event)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.color.value,
            "bans": list(self.bans),
            "bansLocked": self.bans_locked,
            "banImageData": [
                base64.b64encode(data).decode("ascii") if data is not None else None
                for data in self.ban_images
            ],
            "players": [p.to_dict() for p in self.players],
        }
