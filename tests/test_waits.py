import pytest

from mahjong_drill.tiles import parse_hand
from mahjong_drill.waits import WaitPattern, classify


@pytest.mark.parametrize(
    ("waits", "expected"),
    [
        ("", WaitPattern.unknown),
        ("5m", WaitPattern.single_wait),
        ("E", WaitPattern.single_wait),
        ("34m", WaitPattern.two_sided_wait),
        ("47p", WaitPattern.two_sided_wait),
        ("12m", WaitPattern.edge_wait),
        ("89s", WaitPattern.edge_wait),
        ("35m", WaitPattern.closed_wait),
        ("27m", WaitPattern.pair_wait),
        ("2m5p", WaitPattern.pair_wait),
        ("ES", WaitPattern.pair_wait),
        ("5sE", WaitPattern.pair_wait),
        ("147m", WaitPattern.three_sided_wait),
        ("345s", WaitPattern.three_sided_wait),
        ("125m", WaitPattern.multi_wait),
        ("14m7p", WaitPattern.multi_wait),
        ("PFC", WaitPattern.multi_wait),
        ("1258m", WaitPattern.multi_wait),
    ],
)
def test_classify(waits, expected):
    assert classify(parse_hand(waits)) == expected


def test_order_and_duplicates_do_not_matter():
    assert classify(parse_hand("7p4p")) == classify(parse_hand("4p7p"))
    assert classify(parse_hand("55m")) == WaitPattern.single_wait


def test_three_apart_with_both_pairs_held_is_pair_wait():
    hand = parse_hand("123m456m789m44p77p")
    waiting = parse_hand("4p7p")

    assert classify(waiting, hand) == WaitPattern.pair_wait
    assert classify(waiting, parse_hand("123456789m88s56p")) == WaitPattern.two_sided_wait


def test_classify_is_stable():
    waiting = parse_hand("147m")
    assert classify(waiting) == classify(waiting)
