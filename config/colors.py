# config/colors.py
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

Color = Tuple[int, int, int]


# RGB reference swatches sampled from the 1920x1080 draft screen
@dataclass(frozen=True)
class SwatchSet:
    swatches: Dict[str, List[Color]] = field(
        default_factory=lambda: {
            # Pick timer ring under the map name
            "timer.blue": [(33, 112, 255), (40, 130, 255), (70, 160, 255)],
            "timer.red": [(226, 40, 40), (255, 60, 60), (200, 30, 45)],
            "timer.ban": [(150, 60, 230), (175, 90, 255)],
            # Hero name plate background once the pick is locked in
            "hero.background.locked.active": [(24, 64, 140), (30, 80, 160)],
            "hero.background.locked.inactive": [(60, 24, 90), (80, 30, 110)],
            # Hero name text while the player is still hovering heroes
            "hero.name.active.picking": [(255, 255, 255), (240, 240, 255)],
        }
    )

    def get(self, name: str) -> List[Color]:
        return list(self.swatches.get(name, []))


SWATCHES = SwatchSet()
