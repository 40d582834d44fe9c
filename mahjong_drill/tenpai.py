from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from mahjong_drill.decomposer import can_decompose
from mahjong_drill.tiles import COPIES_PER_KIND, HONOR_OFFSET, KIND_COUNT, Tile, count_kinds, present_suits, suit_kinds
from mahjong_drill.waits import WaitPattern, classify

logger = structlog.get_logger()

# hand size -> melds needed (plus one pair) once the winning tile is added
REQUIRED_MELDS = {13: 4, 10: 3, 7: 2}
# 9 + 1 = 10 tiles never equals 3m + 2, so 9-tile hands are accepted but never tenpai
SUPPORTED_SIZES = (7, 9, 10, 13)


@dataclass(frozen=True)
class TenpaiResult:
    is_tenpai: bool
    waiting_tiles: tuple[Tile, ...] = ()
    label: WaitPattern | None = None


NOT_TENPAI = TenpaiResult(is_tenpai=False)


def candidate_kinds(hand: Sequence[Tile], counts: Sequence[int] | None = None) -> list[int]:
    """Kinds worth trying as the completing tile.

    Every rank of each numeral suit in the hand, plus honor kinds already held.
    Kinds held four times are skipped since no fifth copy exists.
    """
    if counts is None:
        counts = count_kinds(hand)
    kinds = [i for suit in present_suits(hand) for i in suit_kinds(suit)]
    kinds.extend(i for i in range(HONOR_OFFSET, KIND_COUNT) if counts[i] > 0)
    return [i for i in kinds if counts[i] < COPIES_PER_KIND]


def find_waits(hand: Sequence[Tile], size: int) -> list[Tile]:
    """Waiting kinds for a hand of ``size`` tiles, sorted by kind index. Empty when not tenpai."""
    if len(hand) != size or size not in SUPPORTED_SIZES:
        return []
    target_melds = REQUIRED_MELDS.get(size)
    if target_melds is None:
        logger.debug("no meld count fits hand size", size=size)
        return []

    counts = count_kinds(hand)
    if any(c > COPIES_PER_KIND for c in counts):
        return []

    waits = []
    for kind in candidate_kinds(hand, counts):
        trial = list(counts)
        trial[kind] += 1
        if can_decompose(trial, target_melds, need_pair=True):
            waits.append(Tile.from_index(kind))
    return waits


def detect_tenpai_sized(hand: Sequence[Tile], size: int) -> TenpaiResult:
    waits = find_waits(hand, size)
    if not waits:
        return NOT_TENPAI
    return TenpaiResult(is_tenpai=True, waiting_tiles=tuple(waits), label=classify(waits, hand))


def detect_tenpai(hand: Sequence[Tile]) -> TenpaiResult:
    return detect_tenpai_sized(hand, 13)


def is_winning_hand(hand: Sequence[Tile]) -> bool:
    """Complete 14-tile hand: four melds and a pair."""
    if len(hand) != 14:
        return False
    counts = count_kinds(hand)
    if any(c > COPIES_PER_KIND for c in counts):
        return False
    return can_decompose(counts, 4, need_pair=True)
