from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from mahjong_drill.exceptions import InvalidCountsError
from mahjong_drill.tiles import HONOR_OFFSET, KIND_COUNT, Tile

MeldKind = Literal["triplet", "run"]
KindCounts = Sequence[int] | Mapping[str | Tile, int]


@dataclass(frozen=True)
class Meld:
    kind: MeldKind
    tiles: tuple[Tile, Tile, Tile]


@dataclass(frozen=True)
class Decomposition:
    melds: tuple[Meld, ...]
    pair: Tile | None


def _as_vector(counts: KindCounts) -> tuple[int, ...]:
    if isinstance(counts, Mapping):
        vector = [0] * KIND_COUNT
        for kind, count in counts.items():
            tile = kind if isinstance(kind, Tile) else Tile.from_code(kind)
            vector[tile.index] += count
    else:
        vector = list(counts)
        if len(vector) != KIND_COUNT:
            raise InvalidCountsError(f"Kind-count vector must have {KIND_COUNT} entries, got {len(vector)}")
    if any(c < 0 for c in vector):
        raise InvalidCountsError("Kind counts must not be negative")
    return tuple(vector)


def _can_start_run(counts: Sequence[int], index: int) -> bool:
    return (
        index < HONOR_OFFSET
        and index % 9 <= 6
        and counts[index] > 0
        and counts[index + 1] > 0
        and counts[index + 2] > 0
    )


@lru_cache(maxsize=50000)
def _can_form_melds(counts: tuple[int, ...], needed_melds: int) -> bool:
    if needed_melds == 0:
        return not any(counts)

    first = next((i for i, c in enumerate(counts) if c > 0), -1)
    if first == -1:
        return False

    # the lowest remaining kind must open a meld: a triplet of it or a run starting at it
    if counts[first] >= 3:
        work = list(counts)
        work[first] -= 3
        if _can_form_melds(tuple(work), needed_melds - 1):
            return True

    if _can_start_run(counts, first):
        work = list(counts)
        work[first] -= 1
        work[first + 1] -= 1
        work[first + 2] -= 1
        if _can_form_melds(tuple(work), needed_melds - 1):
            return True
    return False


def _pair_candidates(counts: tuple[int, ...]) -> list[tuple[int, tuple[int, ...]]]:
    candidates = []
    for i, c in enumerate(counts):
        if c >= 2:
            work = list(counts)
            work[i] -= 2
            candidates.append((i, tuple(work)))
    return candidates


def can_decompose(counts: KindCounts, target_melds: int, need_pair: bool = True) -> bool:
    """True iff the tiles split into exactly ``target_melds`` melds (+ one pair) with nothing left over."""
    vector = _as_vector(counts)
    if target_melds < 0:
        return False
    if sum(vector) != target_melds * 3 + (2 if need_pair else 0):
        return False
    if not need_pair:
        return _can_form_melds(vector, target_melds)
    return any(_can_form_melds(rest, target_melds) for _, rest in _pair_candidates(vector))


def _collect_melds(counts: list[int], needed_melds: int, current: list[Meld]) -> bool:
    if needed_melds == 0:
        return not any(counts)

    first = next((i for i, c in enumerate(counts) if c > 0), -1)
    if first == -1:
        return False

    tile = Tile.from_index(first)
    if counts[first] >= 3:
        counts[first] -= 3
        current.append(Meld("triplet", (tile, tile, tile)))
        if _collect_melds(counts, needed_melds - 1, current):
            return True
        current.pop()
        counts[first] += 3

    if _can_start_run(counts, first):
        for i in range(first, first + 3):
            counts[i] -= 1
        current.append(Meld("run", (tile, Tile.from_index(first + 1), Tile.from_index(first + 2))))
        if _collect_melds(counts, needed_melds - 1, current):
            return True
        current.pop()
        for i in range(first, first + 3):
            counts[i] += 1
    return False


def find_decomposition(counts: KindCounts, target_melds: int, need_pair: bool = True) -> Decomposition | None:
    """Return one decomposition witnessing ``can_decompose``, or None."""
    if not can_decompose(counts, target_melds, need_pair):
        return None

    vector = _as_vector(counts)
    if not need_pair:
        melds: list[Meld] = []
        _collect_melds(list(vector), target_melds, melds)
        return Decomposition(melds=tuple(melds), pair=None)

    for pair_index, rest in _pair_candidates(vector):
        if not _can_form_melds(rest, target_melds):
            continue
        melds = []
        _collect_melds(list(rest), target_melds, melds)
        return Decomposition(melds=tuple(melds), pair=Tile.from_index(pair_index))
    return None
