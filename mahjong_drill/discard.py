from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from mahjong_drill.tenpai import detect_tenpai, detect_tenpai_sized
from mahjong_drill.tiles import COPIES_PER_KIND, Tile, count_kinds
from mahjong_drill.waits import WaitPattern

logger = structlog.get_logger()

DISCARD_SIZES = (8, 10, 14)


@dataclass(frozen=True)
class DiscardCandidate:
    discarded: Tile
    is_tenpai: bool
    waiting_tiles: tuple[Tile, ...]
    completing_count: int
    label: WaitPattern | None = None


@dataclass(frozen=True)
class DiscardEvaluation:
    candidates: tuple[DiscardCandidate, ...] = ()
    best_count: int = 0
    best_discards: tuple[Tile, ...] = ()


def completing_count(hand: Sequence[Tile], waiting: Sequence[Tile]) -> int:
    """Copies of the waiting kinds still drawable, given the tiles already held."""
    counts = count_kinds(hand)
    return sum(max(0, COPIES_PER_KIND - counts[t.index]) for t in waiting)


def _remove_one(hand: Sequence[Tile], tile: Tile) -> list[Tile]:
    rest = list(hand)
    rest.remove(tile)
    return rest


def _evaluate_candidate(hand: Sequence[Tile], tile: Tile) -> DiscardCandidate:
    rest = _remove_one(hand, tile)
    result = detect_tenpai(rest) if len(rest) == 13 else detect_tenpai_sized(rest, len(rest))
    count = completing_count(rest, result.waiting_tiles) if result.is_tenpai else 0
    return DiscardCandidate(
        discarded=tile,
        is_tenpai=result.is_tenpai,
        waiting_tiles=result.waiting_tiles,
        completing_count=count,
        label=result.label,
    )


def evaluate_discards(hand: Sequence[Tile], size: int | None = None) -> DiscardEvaluation:
    """Try each distinct kind as the discard and rank the tenpai outcomes.

    Candidates come back tenpai-first, then by completing count (descending);
    equal counts keep hand order. ``best_discards`` holds every tenpai discard
    reaching ``best_count``, so ties are never broken.
    """
    if size is None:
        size = len(hand)
    if size not in DISCARD_SIZES or len(hand) != size:
        return DiscardEvaluation()

    distinct = list(dict.fromkeys(hand))
    candidates = [_evaluate_candidate(hand, tile) for tile in distinct]
    ranked = sorted(candidates, key=lambda c: (not c.is_tenpai, -c.completing_count))

    tenpai = [c for c in ranked if c.is_tenpai]
    best_count = max((c.completing_count for c in tenpai), default=0)
    best = tuple(c.discarded for c in tenpai if c.completing_count == best_count)
    logger.debug("discards evaluated", size=size, candidates=len(candidates), best_count=best_count)
    return DiscardEvaluation(candidates=tuple(ranked), best_count=best_count, best_discards=best)
