from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, conint

from mahjong_drill.generator import Difficulty
from mahjong_drill.waits import WaitPattern

TileCode = str
DrillMode = Literal["tenpai", "discard"]


class HandRequest(BaseModel):
    tiles: list[TileCode]


class TenpaiResponse(BaseModel):
    is_tenpai: bool
    waiting_tiles: list[TileCode] = Field(default_factory=list)
    label: WaitPattern | None = None


class MeldOut(BaseModel):
    kind: Literal["triplet", "run"]
    tiles: list[TileCode]


class WinResponse(BaseModel):
    is_winning: bool
    melds: list[MeldOut] = Field(default_factory=list)
    pair: TileCode | None = None


class ClassifyRequest(BaseModel):
    waiting_tiles: list[TileCode]
    tiles: list[TileCode] = Field(default_factory=list)


class ClassifyResponse(BaseModel):
    label: WaitPattern


class DiscardCandidateOut(BaseModel):
    discarded: TileCode
    is_tenpai: bool
    waiting_tiles: list[TileCode] = Field(default_factory=list)
    completing_count: int
    label: WaitPattern | None = None


class DiscardResponse(BaseModel):
    candidates: list[DiscardCandidateOut]
    best_count: int
    best_discards: list[TileCode]


class GenerateRequest(BaseModel):
    pattern: WaitPattern
    display_size: Literal[7, 10, 13] = 13


class GeneratedHandResponse(BaseModel):
    hand: list[TileCode]
    waiting_tiles: list[TileCode]
    label: WaitPattern
    concealed: list[TileCode] = Field(default_factory=list)
    fallback: bool = False


class TenpaiDrillRequest(BaseModel):
    display_size: Literal[7, 10, 13] = 13
    difficulty: Difficulty = Difficulty.easy


class DiscardDrillRequest(BaseModel):
    size: Literal[8, 14] = 14
    difficulty: Difficulty = Difficulty.easy


class DrillResponse(BaseModel):
    drill_id: UUID
    mode: DrillMode
    difficulty: Difficulty
    hand: list[TileCode]
    concealed: list[TileCode] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime


class AnswerRequest(BaseModel):
    tiles: list[TileCode]
    elapsed_seconds: conint(ge=0) = 0


class AnswerResponse(BaseModel):
    drill_id: UUID
    mode: DrillMode
    is_correct: bool
    score: int
    correct_selected: list[TileCode] = Field(default_factory=list)
    incorrect_selected: list[TileCode] = Field(default_factory=list)
    missed: list[TileCode] = Field(default_factory=list)
    answer: list[TileCode]
    label: WaitPattern | None = None
    best_count: int | None = None


class LeaderboardEntryOut(BaseModel):
    id: UUID
    mode: str
    score: int
    time_seconds: int
    difficulty: str
    config: dict = Field(default_factory=dict)
    recorded_at: datetime


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryOut]


class LeaderboardStatsResponse(BaseModel):
    mode: str | None = None
    total_games: int
    average_score: float
    best_score: int
    average_time: float
