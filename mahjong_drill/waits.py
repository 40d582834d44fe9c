from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from mahjong_drill.tiles import Tile, count_kinds, sort_tiles


class WaitPattern(str, Enum):
    single_wait = "single_wait"
    two_sided_wait = "two_sided_wait"
    three_sided_wait = "three_sided_wait"
    closed_wait = "closed_wait"
    edge_wait = "edge_wait"
    pair_wait = "pair_wait"
    multi_wait = "multi_wait"
    unknown = "unknown"


def _is_two_pairs(waiting: list[Tile], hand: Iterable[Tile] | None) -> bool:
    if hand is None:
        return False
    counts = count_kinds(hand)
    return all(counts[t.index] >= 2 for t in waiting)


def _classify_two(first: Tile, second: Tile, hand: Iterable[Tile] | None) -> WaitPattern:
    if first.suit is not second.suit or first.is_honor:
        return WaitPattern.pair_wait

    diff = second.rank - first.rank
    if diff == 1:
        if first.rank == 1 or second.rank == 9:
            return WaitPattern.edge_wait
        return WaitPattern.two_sided_wait
    if diff == 2:
        return WaitPattern.closed_wait
    if diff == 3:
        # 56 waits on 4/7; 44+77 waits on the same pair of kinds
        if _is_two_pairs([first, second], hand):
            return WaitPattern.pair_wait
        return WaitPattern.two_sided_wait
    return WaitPattern.pair_wait


def _classify_three(tiles: list[Tile]) -> WaitPattern:
    if len({t.suit for t in tiles}) > 1 or tiles[0].is_honor:
        return WaitPattern.multi_wait
    r1, r2, r3 = (t.rank for t in tiles)
    if r2 - r1 == r3 - r2 > 0:
        return WaitPattern.three_sided_wait
    return WaitPattern.multi_wait


def classify(waiting: Iterable[Tile], hand: Iterable[Tile] | None = None) -> WaitPattern:
    """Name the shape of a waiting set.

    Adjacency checks take priority over the generic multi-wait fallback. ``hand``
    only matters for two same-suit waits three ranks apart, where a hand holding
    both kinds as pairs is a pair wait rather than a two-sided one.
    """
    tiles = sort_tiles(set(waiting))
    if not tiles:
        return WaitPattern.unknown
    if len(tiles) == 1:
        return WaitPattern.single_wait
    if len(tiles) == 2:
        return _classify_two(tiles[0], tiles[1], hand)
    if len(tiles) == 3:
        return _classify_three(tiles)
    return WaitPattern.multi_wait
