from __future__ import annotations

import logging
from dataclasses import dataclass

from app.settings import Settings

from core.game_data import GameData
from core.layout import RoiLayout
from pipeline.ban_matcher import BanImageMatcher
from pipeline.draft import DraftOrchestrator, FrameProvider
from pipeline.events import EventBus

logger = logging.getLogger(__name__)


@dataclass
class AppDeps:
    events: EventBus
    layout: RoiLayout
    game_data: GameData
    matcher: BanImageMatcher
    orchestrator: DraftOrchestrator


def build_deps(settings: Settings, frame_provider: FrameProvider) -> AppDeps:
    events = EventBus()

    layout = RoiLayout(ocr_lang=settings.ocr_lang)
    game_data = GameData.from_file(settings.game_data_file, corrections_file=settings.corrections_file)

    matcher = BanImageMatcher(
        settings.bans_builtin_dir,
        settings.bans_user_dir,
        threshold=settings.ban_match_threshold,
        compare_size=settings.ban_compare_size,
    )

    orchestrator = DraftOrchestrator(
        layout,
        game_data,
        matcher,
        frame_provider,
        events=events,
        lock_border_threshold=settings.lock_border_threshold,
        lock_border_sample=settings.lock_border_sample,
        max_workers=settings.max_workers,
    )

    logger.debug(f"Wired orchestrator (game data: {len(game_data.heroes)} heroes, {len(game_data.maps)} maps)")

    return AppDeps(
        events=events,
        layout=layout,
        game_data=game_data,
        matcher=matcher,
        orchestrator=orchestrator,
    )
