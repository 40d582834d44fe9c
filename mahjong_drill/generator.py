from __future__ import annotations

import random
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

import structlog

from mahjong_drill.config import settings
from mahjong_drill.discard import DiscardEvaluation, evaluate_discards
from mahjong_drill.tenpai import TenpaiResult, detect_tenpai_sized
from mahjong_drill.tiles import (
    COPIES_PER_KIND,
    HONOR_RANKS,
    NUMERAL_SUITS,
    Suit,
    Tile,
    count_kinds,
    parse_hand,
    present_suits,
    suit_kinds,
)
from mahjong_drill.waits import WaitPattern

logger = structlog.get_logger()

RANKS = range(1, 10)
DISPLAY_SIZES = (7, 10, 13)
DISCARD_DRILL_SIZES = (8, 14)
# honor triplets standing in for melds the trainee does not see
CONCEALED_HONOR_TRIPLETS = {7: 2, 10: 1, 13: 0}

# verified tenpai on 4p/7p
FALLBACK_HANDS = {
    13: "123456789m88s56p",
    10: "123456m88s56p",
    7: "123m88s56p",
}
FALLBACK_WAITS = "47p"
FALLBACK_EXTRA_TILE = "1s"

_rng = random.Random(settings.random_seed)


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"
    expert = "expert"


DIFFICULTY_PATTERNS: dict[Difficulty, tuple[WaitPattern, ...]] = {
    Difficulty.easy: (WaitPattern.two_sided_wait, WaitPattern.single_wait),
    Difficulty.medium: (
        WaitPattern.two_sided_wait,
        WaitPattern.single_wait,
        WaitPattern.closed_wait,
        WaitPattern.edge_wait,
        WaitPattern.pair_wait,
    ),
    Difficulty.hard: (WaitPattern.three_sided_wait, WaitPattern.two_sided_wait, WaitPattern.pair_wait),
    Difficulty.expert: (WaitPattern.three_sided_wait, WaitPattern.pair_wait),
}


@dataclass(frozen=True)
class GeneratedHand:
    hand: tuple[Tile, ...]
    waiting_tiles: tuple[Tile, ...]
    label: WaitPattern
    concealed: tuple[Tile, ...] = ()
    fallback: bool = False


@dataclass(frozen=True)
class DiscardDrill:
    hand: tuple[Tile, ...]
    evaluation: DiscardEvaluation
    fallback: bool = False


class _HandBuilder:
    """Single-suit hand under construction, tracking copies used per rank."""

    def __init__(self, suit: Suit, rng: random.Random, fill_attempts: int) -> None:
        self.suit = suit
        self.rng = rng
        self.fill_attempts = fill_attempts
        self.usage: Counter[int] = Counter()
        self.tiles: list[Tile] = []

    def can_add(self, rank: int, copies: int = 1) -> bool:
        return self.usage[rank] + copies <= COPIES_PER_KIND

    def add(self, rank: int, copies: int = 1) -> None:
        self.tiles.extend(Tile(self.suit, rank) for _ in range(copies))
        self.usage[rank] += copies

    def add_shape(self, ranks: Iterable[int]) -> None:
        """Add one copy of each rank; a rank already at the ceiling is swapped for a rank with room left."""
        for rank in ranks:
            if not self.can_add(rank):
                rank = self.pick_rank(max_usage=COPIES_PER_KIND - 1)
            self.add(rank)

    def tiles_of(self, ranks: Iterable[int]) -> list[Tile]:
        return [Tile(self.suit, rank) for rank in ranks]

    def pick_rank(self, exclude: Iterable[int] = (), max_usage: int = 1) -> int:
        """Random rank outside ``exclude`` used at most ``max_usage`` times, else the least-used one."""
        excluded = set(exclude)
        eligible = [r for r in RANKS if r not in excluded]
        open_ranks = [r for r in eligible if self.usage[r] <= max_usage]
        if open_ranks:
            return self.rng.choice(open_ranks)
        return min(eligible, key=lambda r: self.usage[r])

    def add_pair(self, exclude: Iterable[int] = ()) -> int:
        rank = self.pick_rank(exclude, max_usage=1)
        self.add(rank, 2)
        return rank

    def add_melds(self, count: int, exclude: Iterable[int] = ()) -> None:
        """Add ``count`` rank-disjoint melds avoiding ``exclude``; random first, then a triplet sweep."""
        used = set(exclude)
        generated = 0
        for _ in range(self.fill_attempts):
            if generated == count:
                break
            if self.rng.random() < 0.5:
                start = self.rng.randint(1, 7)
                ranks = [start, start + 1, start + 2]
                if any(r in used or not self.can_add(r) for r in ranks):
                    continue
                for rank in ranks:
                    self.add(rank)
                used.update(ranks)
            else:
                rank = self.rng.randint(1, 9)
                if rank in used or not self.can_add(rank, 3):
                    continue
                self.add(rank, 3)
                used.add(rank)
            generated += 1

        while generated < count:
            rank = next((r for r in RANKS if r not in used and self.can_add(r, 3)), None)
            if rank is None:
                break
            self.add(rank, 3)
            used.add(rank)
            generated += 1


def _build_two_sided(builder: _HandBuilder, display_size: int) -> list[Tile]:
    base = builder.rng.randint(2, 7)
    reserved = [base - 1, base, base + 1, base + 2]
    builder.add_melds({7: 1, 10: 2, 13: 3}[display_size], reserved)
    builder.add_pair(reserved)
    builder.add_shape([base, base + 1])
    return builder.tiles_of([base - 1, base + 2])


def _build_single(builder: _HandBuilder, display_size: int) -> list[Tile]:
    builder.add_melds({7: 2, 10: 3, 13: 4}[display_size])
    # alone in its suit the tile can only complete as the pair
    suit = builder.rng.choice([s for s in NUMERAL_SUITS if s is not builder.suit])
    wait = Tile(suit, builder.rng.choice(RANKS))
    builder.tiles.append(wait)
    return [wait]


def _build_three_sided(builder: _HandBuilder, display_size: int) -> list[Tile]:
    base = builder.rng.randint(2, 4)
    run = [base + i for i in range(5)]
    builder.add_shape(run)
    builder.add_melds({7: 0, 10: 1, 13: 2}[display_size], run)
    builder.add_pair(run)
    return builder.tiles_of([base - 1, base + 2, base + 5])


def _build_closed(builder: _HandBuilder, display_size: int) -> list[Tile]:
    base = builder.rng.randint(2, 7)
    reserved = [base, base + 1, base + 2]
    builder.add_melds({7: 1, 10: 2, 13: 3}[display_size], reserved)
    builder.add_pair(reserved)
    builder.add_shape([base, base + 2])
    return builder.tiles_of([base + 1])


def _build_edge(builder: _HandBuilder, display_size: int) -> list[Tile]:
    if builder.rng.random() < 0.5:
        edge, wait = [1, 2], 3
    else:
        edge, wait = [8, 9], 7
    reserved = [*edge, wait]
    builder.add_melds({7: 1, 10: 2, 13: 3}[display_size], reserved)
    builder.add_pair(reserved)
    builder.add_shape(edge)
    return builder.tiles_of([wait])


def _build_pair(builder: _HandBuilder, display_size: int) -> list[Tile]:
    builder.add_melds({7: 1, 10: 2, 13: 3}[display_size])
    first = builder.add_pair()
    second = builder.add_pair([first])
    return builder.tiles_of([first, second])


_CONSTRUCTORS: dict[WaitPattern, Callable[[_HandBuilder, int], list[Tile]]] = {
    WaitPattern.two_sided_wait: _build_two_sided,
    WaitPattern.single_wait: _build_single,
    WaitPattern.three_sided_wait: _build_three_sided,
    WaitPattern.closed_wait: _build_closed,
    WaitPattern.edge_wait: _build_edge,
    WaitPattern.pair_wait: _build_pair,
}
GENERATABLE_PATTERNS = tuple(_CONSTRUCTORS)
# one-kind waits the classifier names single_wait; matched on the exact waiting set instead
EXACT_WAIT_PATTERNS = (WaitPattern.closed_wait, WaitPattern.edge_wait)


def _accepts(pattern: WaitPattern, intended: set[Tile], result: TenpaiResult) -> bool:
    waits = set(result.waiting_tiles)
    if not result.is_tenpai or not intended <= waits:
        return False
    if pattern in EXACT_WAIT_PATTERNS:
        return waits == intended
    return result.label == pattern


def _concealed_honors(display_size: int) -> tuple[Tile, ...]:
    tiles: list[Tile] = []
    for honor in HONOR_RANKS[: CONCEALED_HONOR_TRIPLETS[display_size]]:
        tiles.extend(Tile(Suit.honor, honor) for _ in range(3))
    return tuple(tiles)


def fallback_hand(display_size: int) -> GeneratedHand:
    return GeneratedHand(
        hand=tuple(parse_hand(FALLBACK_HANDS[display_size])),
        waiting_tiles=tuple(parse_hand(FALLBACK_WAITS)),
        label=WaitPattern.two_sided_wait,
        concealed=_concealed_honors(display_size),
        fallback=True,
    )


def generate(
    pattern: WaitPattern | str,
    display_size: int = 13,
    rng: random.Random | None = None,
    max_attempts: int | None = None,
) -> GeneratedHand:
    """Build a hand of ``display_size`` tiles that waits in the shape of ``pattern``.

    Every attempt is checked with the tenpai detector. It must be tenpai, its
    waits must cover the ones the constructor aimed for, and the waiting set
    must classify as ``pattern`` (closed and edge waits must match exactly).
    After ``max_attempts`` misses the verified fallback hand for
    ``display_size`` is returned instead.
    """
    pattern = WaitPattern(pattern)
    if pattern not in _CONSTRUCTORS:
        raise ValueError(f"Cannot generate hands for pattern: {pattern.value}")
    if display_size not in DISPLAY_SIZES:
        raise ValueError(f"display_size must be one of {DISPLAY_SIZES}, got {display_size}")
    if rng is None:
        rng = _rng
    if max_attempts is None:
        max_attempts = settings.generator_max_attempts

    for attempt in range(max_attempts):
        builder = _HandBuilder(rng.choice(NUMERAL_SUITS), rng, settings.meld_fill_attempts)
        intended = set(_CONSTRUCTORS[pattern](builder, display_size))
        result = detect_tenpai_sized(builder.tiles, display_size)
        if _accepts(pattern, intended, result):
            hand = list(builder.tiles)
            rng.shuffle(hand)
            logger.debug("hand generated", pattern=pattern, display_size=display_size, attempts=attempt + 1)
            return GeneratedHand(
                hand=tuple(hand),
                waiting_tiles=result.waiting_tiles,
                label=pattern,
                concealed=_concealed_honors(display_size),
            )

    logger.warning("hand generation fell back", pattern=pattern, display_size=display_size, attempts=max_attempts)
    return fallback_hand(display_size)


def generate_tenpai_hand(
    display_size: int = 13,
    difficulty: Difficulty | str = Difficulty.easy,
    rng: random.Random | None = None,
) -> GeneratedHand:
    if rng is None:
        rng = _rng
    pattern = rng.choice(DIFFICULTY_PATTERNS[Difficulty(difficulty)])
    return generate(pattern, display_size, rng)


def _extra_tile(hand: list[Tile], rng: random.Random) -> Tile:
    counts = count_kinds(hand)
    kinds = [i for suit in present_suits(hand) for i in suit_kinds(suit) if counts[i] < COPIES_PER_KIND]
    return Tile.from_index(rng.choice(kinds))


def generate_discard_hand(
    size: int = 14,
    difficulty: Difficulty | str = Difficulty.easy,
    rng: random.Random | None = None,
    max_attempts: int | None = None,
) -> DiscardDrill:
    """A tenpai hand plus one drawn tile, so that at least one discard restores tenpai.

    Only 8 and 14 are offered: a 10-tile hand leaves 9 tiles after the discard,
    which can never be tenpai.
    """
    if size not in DISCARD_DRILL_SIZES:
        raise ValueError(f"size must be one of {DISCARD_DRILL_SIZES}, got {size}")
    if rng is None:
        rng = _rng
    if max_attempts is None:
        max_attempts = settings.generator_max_attempts

    for _ in range(max_attempts):
        base = generate_tenpai_hand(size - 1, difficulty, rng)
        hand = list(base.hand)
        hand.append(_extra_tile(hand, rng))
        rng.shuffle(hand)
        evaluation = evaluate_discards(hand, size)
        if evaluation.best_discards:
            return DiscardDrill(hand=tuple(hand), evaluation=evaluation)

    logger.warning("discard drill generation fell back", size=size, attempts=max_attempts)
    hand = parse_hand(FALLBACK_HANDS[size - 1] + FALLBACK_EXTRA_TILE)
    return DiscardDrill(hand=tuple(hand), evaluation=evaluate_discards(hand, size), fallback=True)
