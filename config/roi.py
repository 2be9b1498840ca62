from dataclasses import dataclass, field
from typing import Dict, Tuple

from core.draft_schema import BAN_SLOTS, PLAYER_SLOTS, TeamColor

# x, y, w, h
# Frame-level regions are relative to the captured game window.
# Variant regions are relative to their parent slot crop.
Roi = Tuple[float, float, float, float]


@dataclass(frozen=True)
class ROISet:
    MAP_NAME: Roi = (0.40, 0.005, 0.20, 0.035)
    TURN_INDICATOR: Roi = (0.475, 0.040, 0.050, 0.060)

    BAN_FIRST_X: Dict[TeamColor, float] = field(
        default_factory=lambda: {TeamColor.BLUE: 0.352, TeamColor.RED: 0.550}
    )
    BAN_STEP_X: float = 0.033
    BAN_Y: float = 0.006
    BAN_SIZE: Tuple[float, float] = (0.029, 0.052)

    PICK_X: Dict[TeamColor, float] = field(
        default_factory=lambda: {TeamColor.BLUE: 0.060, TeamColor.RED: 0.800}
    )
    PICK_FIRST_Y: float = 0.135
    PICK_STEP_Y: float = 0.150
    PICK_W: float = 0.140
    HERO_NAME_H: float = 0.034
    PLAYER_NAME_OFFSET_Y: float = 0.036
    PLAYER_NAME_H: float = 0.028

    HERO_NAME_VARIANTS: Dict[str, Roi] = field(
        default_factory=lambda: {
            "locked.active": (0.04, 0.05, 0.92, 0.90),
            "locked.inactive": (0.04, 0.05, 0.92, 0.90),
            "active": (0.04, 0.10, 0.92, 0.80),
            "active.picking": (0.04, 0.20, 0.92, 0.70),
            "inactive": (0.04, 0.10, 0.92, 0.80),
        }
    )
    PLAYER_NAME_VARIANTS: Dict[str, Roi] = field(
        default_factory=lambda: {
            "active": (0.00, 0.00, 1.00, 1.00),
            "inactive": (0.10, 0.00, 0.80, 1.00),
        }
    )

    def ban_slot(self, color: TeamColor, index: int) -> Roi:
        if not 0 <= index < BAN_SLOTS:
            raise IndexError(f"ban slot out of range: {index}")
        w, h = self.BAN_SIZE
        return (self.BAN_FIRST_X[color] + index * self.BAN_STEP_X, self.BAN_Y, w, h)

    def hero_name(self, color: TeamColor, index: int) -> Roi:
        if not 0 <= index < PLAYER_SLOTS:
            raise IndexError(f"pick slot out of range: {index}")
        y = self.PICK_FIRST_Y + index * self.PICK_STEP_Y
        return (self.PICK_X[color], y, self.PICK_W, self.HERO_NAME_H)

    def player_name(self, color: TeamColor, index: int) -> Roi:
        x, y, w, _ = self.hero_name(color, index)
        return (x, y + self.PLAYER_NAME_OFFSET_Y, w, self.PLAYER_NAME_H)


ROI = ROISet()
