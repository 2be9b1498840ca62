import base64
import io
import json
from dataclasses import replace

import pytest

from app.settings import Settings
from core.game_data import GameData
from main import build_parser, cmd_correct, cmd_learn
from pipeline.ban_matcher import BanImageMatcher

from tests.conftest import noise_image


@pytest.fixture
def settings(tmp_path, game_data) -> Settings:
    data_file = tmp_path / "game_data.json"
    data_file.write_text(json.dumps({"heroes": game_data.heroes, "maps": game_data.maps}), encoding="utf-8")
    return replace(
        Settings(),
        bans_builtin_dir=tmp_path / "bans",
        bans_user_dir=tmp_path / "user" / "bans",
        game_data_file=data_file,
        corrections_file=tmp_path / "user" / "corrections.json",
    )


def test_env_debug_can_be_switched_off():
    parser = build_parser(Settings(debug=True, debug_save=True))

    args = parser.parse_args(["--no-debug", "--no-debug_save"])
    assert args.debug is False
    assert args.debug_save is False

    args = parser.parse_args([])
    assert args.debug is True
    assert args.command is None


def test_correct_command_persists(settings):
    assert cmd_correct(settings, "vaiia", "valla")

    reloaded = GameData.from_file(settings.game_data_file, corrections_file=settings.corrections_file)
    assert reloaded.correct_hero_name("VAIIA") == "valla"


def test_correct_command_rejects_unknown_hero(settings):
    assert not cmd_correct(settings, "zzz", "nobody")
    assert not settings.corrections_file.exists()


def test_learn_command_accepts_data_uri(settings):
    buf = io.BytesIO()
    noise_image(21).save(buf, format="PNG")
    uri = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

    assert cmd_learn(settings, "valla", uri)
    assert (settings.bans_user_dir / "valla.png").exists()
    assert not cmd_learn(settings, "valla", uri)

    matcher = BanImageMatcher(settings.bans_builtin_dir, settings.bans_user_dir)
    matcher.load()
    assert matcher.classify(noise_image(21)).hero_id == "valla"


def test_learn_command_accepts_file(settings, tmp_path):
    path = tmp_path / "icon.png"
    noise_image(22).save(path)

    assert cmd_learn(settings, "etc", str(path))
    assert (settings.bans_user_dir / "etc.png").exists()
