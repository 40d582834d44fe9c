from __future__ import annotations

from collections.abc import Iterable

from fastapi import HTTPException

from mahjong_drill.exceptions import InvalidTileError
from mahjong_drill.tiles import COPIES_PER_KIND, Tile, count_kinds


def validate_tile(code: str) -> Tile:
    try:
        return Tile.from_code(code)
    except InvalidTileError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid tile code: {code}") from exc


def parse_tiles(codes: Iterable[str]) -> list[Tile]:
    return [validate_tile(code) for code in codes]


def validate_hand(codes: list[str], allowed_sizes: Iterable[int]) -> list[Tile]:
    sizes = tuple(allowed_sizes)
    if len(codes) not in sizes:
        allowed = "/".join(str(s) for s in sizes)
        raise HTTPException(status_code=422, detail=f"Hand must contain {allowed} tiles, got {len(codes)}")

    tiles = parse_tiles(codes)
    counts = count_kinds(tiles)
    for index, count in enumerate(counts):
        if count > COPIES_PER_KIND:
            raise HTTPException(
                status_code=422,
                detail=f"Tile appears {COPIES_PER_KIND + 1}+ times in hand: {Tile.from_index(index).code}",
            )
    return tiles
