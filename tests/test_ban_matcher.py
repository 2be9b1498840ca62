from __future__ import annotations

import base64
import io

import numpy as np
import pytest

from pipeline.ban_matcher import HASH_BITS, BanImageMatcher, compute_phash, hash_distance

from tests.conftest import noise_image


def _hash_with_bits(n: int) -> np.ndarray:
    bits = np.zeros(HASH_BITS, dtype=np.uint8)
    bits[:n] = 1
    return np.packbits(bits)


@pytest.fixture
def synthetic() -> BanImageMatcher:
    m = BanImageMatcher(None, None)
    m.index["tyrael"] = _hash_with_bits(0)
    return m


def test_hash_distance_is_normalized():
    assert hash_distance(_hash_with_bits(0), _hash_with_bits(0)) == 0.0
    assert hash_distance(_hash_with_bits(0), _hash_with_bits(16)) == 0.25
    assert hash_distance(_hash_with_bits(0), _hash_with_bits(64)) == 1.0


def test_accepts_below_threshold(synthetic):
    # 9/64 = 0.140625
    match = synthetic.match_hash(_hash_with_bits(9))
    assert match is not None
    assert match.hero_id == "tyrael"
    assert match.distance == pytest.approx(9 / 64)


def test_rejects_at_or_above_threshold(synthetic):
    # 10/64 = 0.15625
    assert synthetic.match_hash(_hash_with_bits(10)) is None

    synthetic.threshold = 8 / 64
    assert synthetic.match_hash(_hash_with_bits(8)) is None
    assert synthetic.match_hash(_hash_with_bits(7)) is not None


def test_nearest_hero_wins():
    m = BanImageMatcher(None, None)
    far = np.zeros(HASH_BITS, dtype=np.uint8)
    far[-6:] = 1
    m.index.update({"valla": np.packbits(far), "tyrael": _hash_with_bits(0)})

    match = m.match_hash(_hash_with_bits(2))
    assert match.hero_id == "tyrael"


def test_empty_index_matches_nothing():
    assert BanImageMatcher(None, None).match_hash(_hash_with_bits(0)) is None


def test_phash_is_stable_for_same_image():
    img = noise_image(1)
    assert hash_distance(compute_phash(img), compute_phash(img.copy())) == 0.0


def test_load_builtin_then_user(tmp_path):
    builtin = tmp_path / "builtin"
    user = tmp_path / "user"
    builtin.mkdir()
    user.mkdir()
    noise_image(1).save(builtin / "tyrael.png")
    noise_image(2).save(user / "tyrael.png")
    noise_image(3).save(user / "valla.png")
    (user / "notes.txt").write_text("ignored")

    m = BanImageMatcher(builtin, user)
    m.load()

    assert set(m.index) == {"tyrael", "valla"}
    # built-in icon is kept for an id present in both
    assert m.classify(noise_image(1)).hero_id == "tyrael"
    assert m.classify(noise_image(1)).distance == 0.0


def test_load_runs_once(tmp_path):
    m = BanImageMatcher(tmp_path, None)
    m.load()
    noise_image(4).save(tmp_path / "zagara.png")
    m.load()

    assert m.loaded
    assert "zagara" not in m.index


def test_unreadable_icon_is_skipped(tmp_path):
    (tmp_path / "broken.png").write_bytes(b"not a png")
    noise_image(5).save(tmp_path / "tyrael.png")

    m = BanImageMatcher(tmp_path, None)
    m.load()
    assert set(m.index) == {"tyrael"}


def test_unreadable_directory_keeps_loaded_entries(tmp_path):
    builtin = tmp_path / "builtin"
    builtin.mkdir()
    noise_image(1).save(builtin / "tyrael.png")
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x")

    m = BanImageMatcher(builtin, not_a_dir)
    m.load()

    assert m.loaded
    assert set(m.index) == {"tyrael"}


def test_unrelated_image_does_not_match(tmp_path):
    m = BanImageMatcher(None, tmp_path)
    m.learn("tyrael", noise_image(1))
    assert m.classify(noise_image(99)) is None


def test_learn_persists_and_never_replaces(tmp_path):
    m = BanImageMatcher(None, tmp_path)
    m.load()

    assert m.learn("valla", noise_image(7))
    assert (tmp_path / "valla.png").exists()
    assert m.classify(noise_image(7)).hero_id == "valla"

    before = (tmp_path / "valla.png").read_bytes()
    assert not m.learn("valla", noise_image(8))
    assert (tmp_path / "valla.png").read_bytes() == before

    # a fresh process sees the learned icon
    fresh = BanImageMatcher(None, tmp_path)
    fresh.load()
    assert fresh.classify(noise_image(7)).hero_id == "valla"


def test_learn_from_data_uri(tmp_path):
    buf = io.BytesIO()
    noise_image(11).save(buf, format="PNG")
    uri = "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

    m = BanImageMatcher(None, tmp_path)
    assert m.learn_from_base64("etc", uri)
    assert m.classify(noise_image(11)).hero_id == "etc"
