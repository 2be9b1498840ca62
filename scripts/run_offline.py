from __future__ import annotations

# ======================
# Standard library
# ======================
import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

# ======================
# Local modules
# ======================
from app.capture import FolderFrames, list_images, save_player_crops
from app.loop import log_event
from app.settings import Settings
from app.wiring import build_deps
from config.path import PATHS

logger = logging.getLogger("run_offline")


# ======================
# Main
# ======================
def main() -> None:
    defaults = Settings.from_env()

    parser = argparse.ArgumentParser(description="Replay draft screenshots through the tracker")
    parser.add_argument("--frames", type=Path, required=True)
    parser.add_argument("--limit", type=int, default=0)
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=defaults.debug)
    parser.add_argument("--ban_threshold", type=float, default=defaults.ban_match_threshold)
    parser.add_argument("--dump", type=Path, default=None, help="write final draft state as JSON")
    parser.add_argument("--save_crops", action="store_true", help="save last OCR crops per player")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = replace(defaults, debug=args.debug, ban_match_threshold=args.ban_threshold)

    if not args.frames.exists():
        raise FileNotFoundError(f"frames folder not found: {args.frames}")

    img_paths = list_images(args.frames)
    if not img_paths:
        raise FileNotFoundError(f"no images in: {args.frames}")
    if args.limit:
        img_paths = img_paths[: args.limit]

    frames = FolderFrames(img_paths)
    deps = build_deps(settings, frames)
    deps.events.subscribe(lambda event: log_event(event, deps.game_data))

    logger.info(f"OFFLINE frames: {len(img_paths)} from {args.frames}")

    with deps.orchestrator as orchestrator:
        for idx in range(1, len(img_paths) + 1):
            outcome = orchestrator.run_cycle()
            logger.info(f"#[{idx:04d}] {frames.current.name if frames.current else '-'}: {outcome.value}")

        state = orchestrator.draft.to_dict()
        if args.save_crops:
            saved = save_player_crops(orchestrator.draft.players(), PATHS.DEBUG_REGIONS_DIR)
            logger.info(f"Saved {len(saved)} crops to {PATHS.DEBUG_REGIONS_DIR}")

    if args.dump is not None:
        args.dump.write_text(json.dumps(state, indent=2), encoding="utf-8")
        logger.info(f"Draft state written to {args.dump}")
    else:
        print(json.dumps(state, indent=2))


if __name__ == "__main__":
    main()
