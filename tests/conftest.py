from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pytest
from PIL import Image

from config.colors import SWATCHES
from core.draft_schema import BAN_SLOTS, PLAYER_SLOTS, TeamColor, Turn
from core.game_data import GameData
from core.layout import RegionId, RegionKind, RegionResult
from pipeline.ban_matcher import BanImageMatcher, BanMatch
from pipeline.events import EventBus, EventLog

GRAY = (50, 50, 50)
WHITE = (255, 255, 255)

TURN_COLORS = {
    Turn.BLUE: SWATCHES.get("timer.blue")[0],
    Turn.RED: SWATCHES.get("timer.red")[0],
    Turn.BAN: SWATCHES.get("timer.ban")[0],
    Turn.NONE: GRAY,
}


def solid(color, size=(40, 20)) -> Image.Image:
    return Image.new("RGB", size, color)


def noise_image(seed: int, size=(64, 64)) -> Image.Image:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    return Image.fromarray(arr)


@dataclass
class HeroSlot:
    locked: bool = False
    picking: bool = False
    text: str = ""


@dataclass
class FakeScreen:
    """
    Scripted stand-in for the layout collaborator. Each test sets what the
    next cycle should "see"; images are synthesised so the real color
    predicates run against them.
    """

    map_text: str = ""
    turn: Turn = Turn.NONE
    heroes: Dict[Tuple[TeamColor, int], HeroSlot] = field(default_factory=dict)
    names: Dict[Tuple[TeamColor, int, str], str] = field(default_factory=dict)
    fail_on: Optional[RegionKind] = None
    fail_team: Optional[TeamColor] = None
    applied: List[RegionId] = field(default_factory=list)
    threads: Dict[RegionId, str] = field(default_factory=dict)

    def apply(self, region: RegionId, source: Image.Image) -> List[RegionResult]:
        self.applied.append(region)
        self.threads[region] = threading.current_thread().name
        if self.fail_on is region.kind and self.fail_team in (None, region.team):
            raise OSError(f"capture failed for {region}")

        kind = region.kind
        if kind is RegionKind.TOP:
            return [
                self._result(RegionId(RegionKind.MAP_NAME), solid(GRAY), self.map_text),
                self._result(RegionId(RegionKind.TURN_INDICATOR), solid(TURN_COLORS[self.turn])),
            ]

        if kind is RegionKind.BANS:
            results = []
            for i in range(BAN_SLOTS):
                img = solid(GRAY, (30, 30))
                img.info["slot"] = (region.team, i)
                results.append(self._result(RegionId(RegionKind.BAN_SLOT, region.team, i), img))
            return results

        if kind is RegionKind.PICKS:
            status = "active" if self.turn.value == region.team.value else "inactive"
            results = []
            for i in range(PLAYER_SLOTS):
                slot = self.heroes.get((region.team, i), HeroSlot())
                if slot.locked:
                    img = solid(SWATCHES.get(f"hero.background.locked.{status}")[0])
                else:
                    img = solid(GRAY)
                    if slot.picking:
                        img.paste(WHITE, (10, 5, 20, 15))
                results.append(self._result(RegionId(RegionKind.HERO_NAME, region.team, i), img))
                results.append(self._result(RegionId(RegionKind.PLAYER_NAME, region.team, i), solid(GRAY)))
            return results

        if kind is RegionKind.HERO_NAME:
            text = self.heroes.get((region.team, region.index), HeroSlot()).text
            return [self._result(region, source, text)]

        if kind is RegionKind.PLAYER_NAME:
            text = self.names.get((region.team, region.index, region.variant), "")
            return [self._result(region, source, text)]

        raise AssertionError(f"unexpected region {region}")

    def sampled(self, kind: RegionKind) -> List[RegionId]:
        return [r for r in self.applied if r.kind is kind]

    @staticmethod
    def _result(region: RegionId, image: Image.Image, text: Optional[str] = None) -> RegionResult:
        return RegionResult(region=region, image=image, ocr_text=text, swatches=dict(SWATCHES.swatches))


class ScriptedMatcher(BanImageMatcher):
    """Answers classify() from a per-slot script instead of real hashes."""

    def __init__(self):
        super().__init__(None, None)
        self.script: Dict[Tuple[TeamColor, int], Optional[BanMatch]] = {}
        self.load_calls = 0

    def load(self) -> None:
        self.load_calls += 1
        super().load()

    def classify(self, image: Image.Image) -> Optional[BanMatch]:
        return self.script.get(image.info.get("slot"))


@pytest.fixture
def game_data() -> GameData:
    return GameData(
        heroes={"tyrael": "Tyrael", "valla": "Valla", "liming": "Li-Ming", "etc": "E.T.C."},
        maps=["Sky Temple", "Braxis Holdout", "Infernal Shrines", "Hanamura Temple", "Garden of Terror"],
        corrections={"TYRAE": "tyrael"},
        battletags={"Player123": ["Player123#1234"]},
        picks={"Player123#1234": [("Tyrael", 12), ("Valla", 3)]},
    )


@pytest.fixture
def screen() -> FakeScreen:
    return FakeScreen()


@pytest.fixture
def matcher() -> ScriptedMatcher:
    return ScriptedMatcher()


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def events(event_log) -> EventBus:
    bus = EventBus()
    bus.subscribe(event_log)
    return bus
