from __future__ import annotations

# ======================
# Standard library
# ======================
import argparse
import logging
from dataclasses import replace
from pathlib import Path

# ======================
# Local modules
# ======================
from app.capture import open_rgb, window_frame_provider
from app.loop import log_event, run_loop
from app.settings import Settings
from app.wiring import build_deps
from core.game_data import GameData
from pipeline.ban_matcher import BanImageMatcher

logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def cmd_watch(settings: Settings) -> None:
    # pywin32 is only needed for live capture
    from core.screen_capture import GameWindow

    window = GameWindow(settings.window_title)
    deps = build_deps(settings, window_frame_provider(window, settings.debug_save))
    deps.events.subscribe(lambda event: log_event(event, deps.game_data))

    logger.info(f"Watching '{settings.window_title}' every {settings.sleep_sec:.2f}s")
    try:
        run_loop(settings, deps)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        deps.orchestrator.close()


def cmd_learn(settings: Settings, hero_id: str, image: str) -> bool:
    """`image` is a file path or a data URI copied from a ban image dump."""
    matcher = BanImageMatcher(
        settings.bans_builtin_dir,
        settings.bans_user_dir,
        threshold=settings.ban_match_threshold,
        compare_size=settings.ban_compare_size,
    )
    matcher.load()

    if image.startswith("data:"):
        learned = matcher.learn_from_base64(hero_id, image)
    else:
        learned = matcher.learn(hero_id, open_rgb(Path(image)))

    if learned:
        logger.info(f"Saved ban icon for '{hero_id}' to {settings.bans_user_dir}")
    else:
        logger.warning(f"'{hero_id}' already has a ban icon, nothing saved")
    return learned


def cmd_correct(settings: Settings, raw: str, hero_id: str) -> bool:
    game_data = GameData.from_file(settings.game_data_file, corrections_file=settings.corrections_file)
    try:
        game_data.learn_hero_correction(raw, hero_id)
    except (KeyError, ValueError) as e:
        logger.error(f"Correction not saved: {e}")
        return False

    game_data.save_corrections(settings.corrections_file)
    logger.info(f"Saved correction to {settings.corrections_file}")
    return True


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track a Heroes of the Storm draft from screen captures")
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=defaults.debug)
    parser.add_argument("--debug_save", action=argparse.BooleanOptionalAction, default=defaults.debug_save)
    parser.add_argument("--sleep", type=float, default=defaults.sleep_sec)
    parser.add_argument("--window_title", type=str, default=defaults.window_title)

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("watch", help="capture the game window and track the draft (default)")

    learn = sub.add_parser("learn", help="label an unknown ban icon")
    learn.add_argument("hero_id")
    learn.add_argument("image", help="image file or data:image/png;base64,... URI")

    correct = sub.add_parser("correct", help="map a misread hero name to a hero id")
    correct.add_argument("raw", help="text as read by OCR")
    correct.add_argument("hero_id")
    return parser


def main() -> None:
    defaults = Settings.from_env()
    args = build_parser(defaults).parse_args()
    setup_logging(args.debug)

    settings = replace(
        defaults,
        debug=args.debug,
        debug_save=args.debug_save,
        sleep_sec=args.sleep,
        window_title=args.window_title,
    )

    if args.command == "learn":
        cmd_learn(settings, args.hero_id, args.image)
    elif args.command == "correct":
        cmd_correct(settings, args.raw, args.hero_id)
    else:
        cmd_watch(settings)


if __name__ == "__main__":
    main()
