# core/draft_schema.py
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

BAN_SLOTS = 3
PLAYER_SLOTS = 5

# Stored as the ban hero when the icon could not be matched
UNKNOWN_HERO = "???"

# Pick slot status relative to the team that is currently picking
PickStatus = Literal["active", "inactive"]


class TeamColor(str, Enum):
    BLUE = "blue"
    RED = "red"

    @property
    def other(self) -> "TeamColor":
        return TeamColor.RED if self is TeamColor.BLUE else TeamColor.BLUE


class Turn(str, Enum):
    BLUE = "blue"
    RED = "red"
    BAN = "ban"
    NONE = "none"


def pick_status(turn: Turn, color: TeamColor) -> Optional[PickStatus]:
    """
    active   : this team is picking right now
    inactive : the other team is picking
    None     : ban phase or no turn indicator
    """
    if turn.value == color.value:
        return "active"
    if turn.value == color.other.value:
        return "inactive"
    return None
