# pipeline/draft.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from PIL import Image

from core.draft_schema import UNKNOWN_HERO, PickStatus, TeamColor, Turn, pick_status
from core.game_data import NameService
from core.image_utils import border_match_percent, contains_color, encode_png
from core.layout import Layout, RegionId, RegionKind, RegionResult, first_result
from pipeline.ban_matcher import BanImageMatcher
from pipeline.classifier import TurnClassifier
from pipeline.events import DraftCleared, DraftStarted, EventBus, MapChanged
from pipeline.player import Player
from pipeline.team import Team

logger = logging.getLogger(__name__)

FrameProvider = Callable[[], Optional[Image.Image]]
# None: no game window / capture not possible this tick


class CycleOutcome(str, Enum):
    DRAFT_NOT_ACTIVE = "draft_not_active"
    DRAFT_UPDATED = "draft_updated"


# Decisions taken by worker threads, committed on the cycle thread
@dataclass(frozen=True)
class BanUpdate:
    team: Team
    index: int
    hero: str
    image_data: Optional[bytes]
    lock: bool


@dataclass(frozen=True)
class PickUpdate:
    player: Player
    character: Optional[str]
    unknown: bool
    locked: bool
    image: Image.Image


@dataclass(frozen=True)
class NameUpdate:
    player: Player
    name: str
    final: bool
    image: Image.Image


class Draft:
    """Map, turn and both teams of the draft currently on screen."""

    def __init__(self, events: Optional[EventBus] = None):
        self.events = events or EventBus()
        self.map: Optional[str] = None
        self.turn = Turn.NONE
        self.teams: Dict[TeamColor, Team] = {}
        self.clear()

    def clear(self) -> None:
        for team in self.teams.values():
            team.detach()

        self.map = None
        self.turn = Turn.NONE
        self.teams = {color: Team(color, self.events) for color in TeamColor}
        self.events.emit(DraftCleared())

    def start(self, map_name: str) -> None:
        self.clear()
        self.events.emit(DraftStarted())
        self.map = map_name
        self.events.emit(MapChanged(map_name=map_name))

    def team(self, color: TeamColor) -> Team:
        return self.teams[color]

    def players(self) -> List[Player]:
        return [*self.teams[TeamColor.BLUE].players, *self.teams[TeamColor.RED].players]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map": self.map,
            "teamActive": self.turn.value,
            "teams": {color.value: team.to_dict() for color, team in self.teams.items()},
        }


class DraftOrchestrator:
    """
    One detection cycle over the draft screen.

    The caller decides the cadence and must not overlap cycles. Inside a
    cycle the top region is read first; ban slots and pick slots of both
    teams are then sampled on a thread pool. Workers only decide; their
    updates are applied after the whole phase joined, so a failing phase
    leaves the draft untouched.
    """

    def __init__(
        self,
        layout: Layout,
        game_data: NameService,
        matcher: BanImageMatcher,
        frame_provider: FrameProvider,
        *,
        events: Optional[EventBus] = None,
        turn_classifier: Optional[TurnClassifier] = None,
        lock_border_threshold: int = 200,
        lock_border_sample: Tuple[int, int] = (5, 5),
        max_workers: int = 6,
    ):
        self.layout = layout
        self.game_data = game_data
        self.matcher = matcher
        self.frame_provider = frame_provider
        self.turn_classifier = turn_classifier or TurnClassifier()
        self.lock_border_threshold = lock_border_threshold
        self.lock_border_sample = lock_border_sample

        self.draft = Draft(events)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="draft")

    @property
    def events(self) -> EventBus:
        return self.draft.events

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "DraftOrchestrator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def clear(self) -> None:
        self.draft.clear()

    # ======================
    # Cycle
    # ======================
    def run_cycle(self) -> CycleOutcome:
        self.matcher.load()

        frame = self.frame_provider()
        if frame is None:
            logger.debug("No frame this cycle")
            return CycleOutcome.DRAFT_NOT_ACTIVE

        if not self._update_top(frame):
            return CycleOutcome.DRAFT_NOT_ACTIVE

        # Each phase decides on the pool and commits here, only once every task succeeded
        if self.draft.turn is not Turn.BAN:
            sampled = self._join([lambda c=c: self._sample_bans(frame, c) for c in TeamColor])
            slots = [slot for team_slots in sampled for slot in team_slots]
            ban_updates = self._join([lambda s=s: self._resolve_ban(*s) for s in slots])
            for update in ban_updates:
                if update is not None:
                    self._apply_ban(update)

        pick_updates = self._join([lambda c=c: self._resolve_picks(frame, c) for c in TeamColor])
        for team_updates in pick_updates:
            for update in team_updates:
                self._apply_pick(update)

        logger.debug(f"Draft updated: map={self.draft.map} turn={self.draft.turn.value}")
        return CycleOutcome.DRAFT_UPDATED

    def _join(self, tasks: Sequence[Callable[[], Any]]) -> List[Any]:
        """Run tasks on the pool, wait for all, re-raise the first failure."""
        futures = [self._executor.submit(t) for t in tasks]
        wait(futures)
        return [f.result() for f in futures]

    # ======================
    # Top: map name + turn indicator
    # ======================
    def _update_top(self, frame: Image.Image) -> bool:
        results = self.layout.apply(RegionId.top(), frame)

        turn = Turn.NONE
        for result in results:
            kind = result.region.kind
            if kind is RegionKind.MAP_NAME:
                self._update_map(result.ocr_text or "")
            elif kind is RegionKind.TURN_INDICATOR:
                turn = self.turn_classifier.classify(result)

        self.draft.turn = turn
        return self.draft.map is not None and turn is not Turn.NONE

    def _update_map(self, raw: str) -> None:
        map_name = self.game_data.fix_map_name(raw)
        if not map_name or not self.game_data.map_exists(map_name):
            return

        if map_name != self.draft.map:
            logger.info(f"Draft started on '{map_name}'")
            self.draft.start(map_name)

    # ======================
    # Bans
    # ======================
    def _sample_bans(self, frame: Image.Image, color: TeamColor) -> List[Tuple[Team, int, Image.Image]]:
        team = self.draft.team(color)
        return [
            (team, result.region.index, result.image)
            for result in self.layout.apply(RegionId.bans(color), frame)
            if result.region.kind is RegionKind.BAN_SLOT
        ]

    def _resolve_ban(self, team: Team, index: int, image: Image.Image) -> Optional[BanUpdate]:
        # Watermark as of the start of the phase: one promotion per team per cycle
        bans_locked = team.bans_locked
        if index < bans_locked:
            logger.debug(f"Ban #{index + 1} {team.color.value} skipped (already locked)")
            return None

        match = self.matcher.classify(image)
        if match is None:
            return BanUpdate(team, index, UNKNOWN_HERO, encode_png(image), lock=False)

        logger.debug(f"Ban #{index + 1} {team.color.value}: {match.hero_id} @ {match.distance:.3f}")
        return BanUpdate(team, index, match.hero_id, None, lock=bans_locked == index)

    @staticmethod
    def _apply_ban(update: BanUpdate) -> None:
        team = update.team
        team.add_ban(update.index, update.hero)
        team.add_ban_image(update.index, update.image_data)
        if update.lock:
            team.set_bans_locked(update.index + 1)

    # ======================
    # Picks
    # ======================
    def _resolve_picks(self, frame: Image.Image, color: TeamColor) -> List[Union[PickUpdate, NameUpdate]]:
        team = self.draft.team(color)
        status = pick_status(self.draft.turn, color)
        results = self.layout.apply(RegionId.picks(color), frame)

        updates: List[Union[PickUpdate, NameUpdate]] = []
        for result in results:
            player = team.player(result.region.index)
            if player is None:
                continue

            if result.region.kind is RegionKind.HERO_NAME:
                update = self._resolve_hero(player, status, result)
            elif result.region.kind is RegionKind.PLAYER_NAME:
                update = self._resolve_player_name(player, status, result)
            else:
                update = None

            if update is not None:
                updates.append(update)
        return updates

    def _resolve_hero(
        self, player: Player, status: Optional[PickStatus], result: RegionResult
    ) -> Optional[PickUpdate]:
        if status is None or player.locked:
            return None

        sample_w, sample_h = self.lock_border_sample
        border = border_match_percent(
            result.image,
            result.colors(f"hero.background.locked.{status}"),
            sample_w,
            sample_h,
        )

        locked = False
        if border > self.lock_border_threshold:
            variant = f"locked.{status}"
            locked = True
        elif status == "active" and contains_color(result.image, result.colors("hero.name.active.picking")):
            variant = "active.picking"
        else:
            variant = status

        sub = self._sample(result.region.with_variant(variant), result.image)
        hero = self.game_data.correct_hero_name(sub.ocr_text or "")
        return PickUpdate(
            player,
            character=hero or None,
            unknown=not self.game_data.hero_exists(hero),
            locked=locked,
            image=sub.image,
        )

    def _resolve_player_name(
        self, player: Player, status: Optional[PickStatus], result: RegionResult
    ) -> Optional[NameUpdate]:
        if status is None or player.name_final:
            return None

        sub = self._sample(result.region.with_variant(status), result.image)
        name = (sub.ocr_text or "").strip()
        if not name:
            return None

        # Names read while the team is not picking are stable
        return NameUpdate(player, name=name, final=(status == "inactive"), image=sub.image)

    def _apply_pick(self, update: Union[PickUpdate, NameUpdate]) -> None:
        player = update.player
        if isinstance(update, PickUpdate):
            player.set_image_hero_name(update.image)
            player.set_pick(update.character, unknown=update.unknown, locked=update.locked)
        else:
            player.set_name(update.name, final=update.final)
            player.set_image_player_name(update.image)
            self.game_data.update_player_recent_picks(player)

    def _sample(self, region: RegionId, parent: Image.Image) -> RegionResult:
        return first_result(self.layout.apply(region, parent), region)
