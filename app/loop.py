from __future__ import annotations

import logging
import time
from typing import Optional

from app.settings import Settings
from app.wiring import AppDeps
from core.game_data import GameData
from pipeline.draft import CycleOutcome
from pipeline.events import BanChanged, DraftEvent, DraftStarted, MapChanged, PlayerChanged

logger = logging.getLogger(__name__)


def log_event(event: DraftEvent, game_data: Optional[GameData] = None) -> None:
    hero_name = game_data.get_hero_name if game_data is not None else (lambda hero_id: hero_id)

    if isinstance(event, DraftStarted):
        logger.info("[DRAFT] started")
    elif isinstance(event, MapChanged):
        logger.info(f"[DRAFT] map: {event.map_name}")
    elif isinstance(event, BanChanged):
        state = "locked" if event.locked else "tentative"
        logger.info(f"[BAN] {event.team.value} #{event.index + 1}: {hero_name(event.hero)} ({state})")
    elif isinstance(event, PlayerChanged):
        p = event.player
        logger.info(
            f"[PICK] {event.team.value} #{event.index + 1}: "
            f"{p['name']} -> {hero_name(p['character'])}{' (locked)' if p['locked'] else ''}"
        )


def run_loop(
    settings: Settings,
    deps: AppDeps,
    stop_event: Optional[object] = None,  # threading.Event or similar
    max_cycles: Optional[int] = None,
) -> None:
    """
    Calls the orchestrator every `sleep_sec`. A failed cycle is logged and
    retried on the next tick; nothing inside a cycle retries on its own.
    """
    cycles = 0
    was_active = False

    while True:
        if stop_event is not None and getattr(stop_event, "is_set")():
            logger.info("stop_event set -> exit loop")
            return
        if max_cycles is not None and cycles >= max_cycles:
            return
        cycles += 1

        try:
            outcome = deps.orchestrator.run_cycle()
        except Exception:
            logger.exception("Detection cycle failed")
            time.sleep(settings.sleep_sec)
            continue

        active = outcome is CycleOutcome.DRAFT_UPDATED
        if active != was_active:
            logger.info("Draft detected" if active else "Draft not active")
            was_active = active

        time.sleep(settings.sleep_sec)
