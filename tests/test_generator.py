import random

import pytest

from mahjong_drill.generator import (
    DIFFICULTY_PATTERNS,
    EXACT_WAIT_PATTERNS,
    FALLBACK_HANDS,
    GENERATABLE_PATTERNS,
    Difficulty,
    _accepts,
    _HandBuilder,
    fallback_hand,
    generate,
    generate_discard_hand,
    generate_tenpai_hand,
)
from mahjong_drill.tenpai import TenpaiResult, detect_tenpai_sized
from mahjong_drill.tiles import Suit, is_valid_hand, parse_hand
from mahjong_drill.waits import WaitPattern, classify


@pytest.mark.parametrize("pattern", GENERATABLE_PATTERNS)
@pytest.mark.parametrize("display_size", [7, 10, 13])
def test_generated_hands_are_tenpai(pattern, display_size):
    for seed in range(5):
        generated = generate(pattern, display_size, rng=random.Random(seed))

        assert len(generated.hand) == display_size
        assert is_valid_hand([*generated.hand, *generated.concealed])
        result = detect_tenpai_sized(list(generated.hand), display_size)
        assert result.is_tenpai
        assert result.waiting_tiles == generated.waiting_tiles
        assert generated.label == pattern or (generated.fallback and generated.label == WaitPattern.two_sided_wait)


@pytest.mark.parametrize(("display_size", "concealed"), [(7, 6), (10, 3), (13, 0)])
def test_concealed_honor_triplets(display_size, concealed):
    generated = generate(WaitPattern.two_sided_wait, display_size, rng=random.Random(1))

    assert len(generated.concealed) == concealed
    assert all(t.is_honor for t in generated.concealed)


ROUND_TRIP_PATTERNS = [
    WaitPattern.two_sided_wait,
    WaitPattern.single_wait,
    WaitPattern.three_sided_wait,
    WaitPattern.pair_wait,
]


@pytest.mark.parametrize("pattern", ROUND_TRIP_PATTERNS)
@pytest.mark.parametrize("display_size", [7, 10, 13])
def test_generated_shape_classifies_back(pattern, display_size):
    fallbacks = 0
    for seed in range(20):
        generated = generate(pattern, display_size, rng=random.Random(seed))
        if generated.fallback:
            fallbacks += 1
            continue
        assert classify(generated.waiting_tiles, generated.hand) == pattern
    assert fallbacks <= 2


@pytest.mark.parametrize("pattern", [WaitPattern.single_wait, *EXACT_WAIT_PATTERNS])
@pytest.mark.parametrize("display_size", [7, 10, 13])
def test_one_kind_patterns_wait_on_exactly_one_kind(pattern, display_size):
    for seed in range(10):
        generated = generate(pattern, display_size, rng=random.Random(seed))
        if generated.fallback:
            continue
        assert len(generated.waiting_tiles) == 1
        assert classify(generated.waiting_tiles, generated.hand) == WaitPattern.single_wait


def test_extra_waits_are_rejected():
    edge = TenpaiResult(True, tuple(parse_hand("36m")), WaitPattern.two_sided_wait)
    assert not _accepts(WaitPattern.edge_wait, set(parse_hand("3m")), edge)
    assert not _accepts(WaitPattern.single_wait, set(parse_hand("3m")), edge)

    exact = TenpaiResult(True, tuple(parse_hand("3m")), WaitPattern.single_wait)
    assert _accepts(WaitPattern.edge_wait, set(parse_hand("3m")), exact)
    assert not _accepts(WaitPattern.edge_wait, set(parse_hand("3m")), TenpaiResult(False))


def test_add_shape_swaps_a_rank_at_the_ceiling():
    builder = _HandBuilder(Suit.man, random.Random(0), fill_attempts=10)
    builder.add(5, 4)
    builder.add_shape([4, 5])

    assert len(builder.tiles) == 6
    assert is_valid_hand(builder.tiles)
    assert builder.usage[4] >= 1


def test_same_seed_same_hand():
    first = generate(WaitPattern.pair_wait, 13, rng=random.Random(42))
    second = generate(WaitPattern.pair_wait, 13, rng=random.Random(42))
    assert first == second


def test_exhausted_attempts_fall_back():
    generated = generate(WaitPattern.three_sided_wait, 13, rng=random.Random(0), max_attempts=0)

    assert generated.fallback
    assert generated.label == WaitPattern.two_sided_wait
    assert generated.hand == tuple(parse_hand("123456789m88s56p"))
    assert [t.code for t in generated.waiting_tiles] == ["4p", "7p"]


@pytest.mark.parametrize("display_size", sorted(FALLBACK_HANDS))
def test_fallback_hands_wait_on_4p_7p(display_size):
    fallback = fallback_hand(display_size)
    result = detect_tenpai_sized(list(fallback.hand), display_size)

    assert result.waiting_tiles == fallback.waiting_tiles
    assert classify(result.waiting_tiles, fallback.hand) == WaitPattern.two_sided_wait


def test_rejects_patterns_without_a_constructor():
    with pytest.raises(ValueError):
        generate(WaitPattern.multi_wait)
    with pytest.raises(ValueError):
        generate(WaitPattern.unknown)
    with pytest.raises(ValueError):
        generate("not_a_pattern")


def test_rejects_unsupported_display_size():
    with pytest.raises(ValueError):
        generate(WaitPattern.single_wait, 9)


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_tenpai_hand_follows_difficulty(difficulty):
    generated = generate_tenpai_hand(10, difficulty, rng=random.Random(3))

    assert len(generated.hand) == 10
    assert generated.label in DIFFICULTY_PATTERNS[difficulty] or generated.fallback


@pytest.mark.parametrize("size", [8, 14])
def test_discard_drill_has_a_best_discard(size):
    drill = generate_discard_hand(size, Difficulty.medium, rng=random.Random(11))

    assert len(drill.hand) == size
    assert is_valid_hand(drill.hand)
    assert drill.evaluation.best_discards
    assert drill.evaluation.best_count > 0


def test_discard_drill_fallback():
    drill = generate_discard_hand(14, rng=random.Random(0), max_attempts=0)

    assert drill.fallback
    assert [t.code for t in drill.evaluation.best_discards] == ["1s"]
    assert drill.evaluation.best_count == 8


def test_discard_drill_rejects_ten_tiles():
    with pytest.raises(ValueError):
        generate_discard_hand(10)
