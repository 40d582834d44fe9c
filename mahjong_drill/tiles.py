from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from mahjong_drill.exceptions import InvalidTileError


class Suit(str, Enum):
    man = "m"
    pin = "p"
    sou = "s"
    honor = "z"


NUMERAL_SUITS = (Suit.man, Suit.pin, Suit.sou)
# winds E/S/W/N, then dragons P (white), F (green), C (red)
HONOR_RANKS = ("E", "S", "W", "N", "P", "F", "C")
COPIES_PER_KIND = 4
KIND_COUNT = 34
HONOR_OFFSET = 27

_SUIT_BASE = {Suit.man: 0, Suit.pin: 9, Suit.sou: 18}
TILE_CODE_RE = re.compile(r"^(?:[1-9][mps]|[1-7]z|[ESWNPFC])$")
_HAND_TOKEN_RE = re.compile(r"([1-9]+)([mpsz])|([ESWNPFC])|(\s+)")


@dataclass(frozen=True)
class Tile:
    suit: Suit
    rank: int | str

    def __post_init__(self) -> None:
        try:
            suit = Suit(self.suit)
        except (ValueError, TypeError):
            raise InvalidTileError(f"Invalid suit: {self.suit!r}") from None
        object.__setattr__(self, "suit", suit)

        if suit is Suit.honor:
            if self.rank not in HONOR_RANKS:
                raise InvalidTileError(f"Invalid honor tile: {self.rank!r}")
        elif isinstance(self.rank, bool) or not isinstance(self.rank, int) or not 1 <= self.rank <= 9:
            raise InvalidTileError(f"Invalid rank: {self.rank!r}, must be 1-9")

    @property
    def is_honor(self) -> bool:
        return self.suit is Suit.honor

    @property
    def index(self) -> int:
        if self.is_honor:
            return HONOR_OFFSET + HONOR_RANKS.index(self.rank)
        return _SUIT_BASE[self.suit] + self.rank - 1

    @property
    def code(self) -> str:
        if self.is_honor:
            return self.rank
        return f"{self.rank}{self.suit.value}"

    def __str__(self) -> str:
        return self.code

    @classmethod
    def from_code(cls, code: str) -> Tile:
        if not isinstance(code, str) or not TILE_CODE_RE.fullmatch(code):
            raise InvalidTileError(f"Invalid tile code: {code!r}")
        if code in HONOR_RANKS:
            return cls(Suit.honor, code)
        rank, suit = int(code[0]), Suit(code[1])
        if suit is Suit.honor:
            return cls(Suit.honor, HONOR_RANKS[rank - 1])
        return cls(suit, rank)

    @classmethod
    def from_index(cls, index: int) -> Tile:
        if not 0 <= index < KIND_COUNT:
            raise InvalidTileError(f"Invalid kind index: {index}")
        if index >= HONOR_OFFSET:
            return cls(Suit.honor, HONOR_RANKS[index - HONOR_OFFSET])
        return cls(NUMERAL_SUITS[index // 9], index % 9 + 1)


def make_tile(suit: Suit | str, rank: int | str) -> Tile:
    return Tile(suit, rank)


def sort_tiles(tiles: Iterable[Tile]) -> list[Tile]:
    return sorted(tiles, key=lambda t: t.index)


def count_kinds(tiles: Iterable[Tile]) -> list[int]:
    """Hand -> 34-slot kind-count vector indexed by Tile.index."""
    counts = [0] * KIND_COUNT
    for tile in tiles:
        counts[tile.index] += 1
    return counts


def is_valid_hand(tiles: Iterable[Tile]) -> bool:
    return all(c <= COPIES_PER_KIND for c in count_kinds(tiles))


def present_suits(tiles: Iterable[Tile]) -> list[Suit]:
    """Numeral suits that appear in the hand, in m/p/s order."""
    seen = {t.suit for t in tiles}
    return [suit for suit in NUMERAL_SUITS if suit in seen]


def suit_kinds(suit: Suit) -> range:
    base = _SUIT_BASE[suit]
    return range(base, base + 9)


def parse_hand(text: str) -> list[Tile]:
    """Parse compact notation such as ``"123m456p88s EEE"`` or ``"11z"``.

    Digits bind to the suit letter that follows them; ``1z``-``7z`` and the bare
    letters E/S/W/N/P/F/C both denote honors.
    """
    tiles: list[Tile] = []
    pos = 0
    while pos < len(text):
        match = _HAND_TOKEN_RE.match(text, pos)
        if not match:
            raise InvalidTileError(f"Cannot parse hand {text!r} at position {pos}")
        digits, suit, honor, _ = match.groups()
        if honor:
            tiles.append(Tile(Suit.honor, honor))
        elif digits:
            for ch in digits:
                tiles.append(Tile.from_code(f"{ch}{suit}"))
        pos = match.end()
    return tiles


def format_hand(tiles: Iterable[Tile]) -> str:
    ordered = sort_tiles(tiles)
    parts: list[str] = []
    for suit in NUMERAL_SUITS:
        ranks = "".join(str(t.rank) for t in ordered if t.suit is suit)
        if ranks:
            parts.append(f"{ranks}{suit.value}")
    parts.extend(t.rank for t in ordered if t.is_honor)
    return "".join(parts)
