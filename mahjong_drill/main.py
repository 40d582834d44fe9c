from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from uuid import UUID

import structlog
from fastapi import FastAPI, HTTPException

from mahjong_drill.config import settings
from mahjong_drill.decomposer import find_decomposition
from mahjong_drill.discard import DISCARD_SIZES, evaluate_discards
from mahjong_drill.generator import generate, generate_discard_hand, generate_tenpai_hand
from mahjong_drill.grading import grade_discard_answer, grade_tenpai_answer
from mahjong_drill.logging import setup_logging
from mahjong_drill.repository import DrillRepository, Leaderboard, StoredDrill
from mahjong_drill.schemas import (
    AnswerRequest,
    AnswerResponse,
    ClassifyRequest,
    ClassifyResponse,
    DiscardCandidateOut,
    DiscardDrillRequest,
    DiscardResponse,
    DrillResponse,
    GeneratedHandResponse,
    GenerateRequest,
    HandRequest,
    LeaderboardEntryOut,
    LeaderboardResponse,
    LeaderboardStatsResponse,
    MeldOut,
    TenpaiDrillRequest,
    TenpaiResponse,
    WinResponse,
)
from mahjong_drill.tenpai import SUPPORTED_SIZES, detect_tenpai_sized
from mahjong_drill.tiles import Tile, count_kinds
from mahjong_drill.validators import parse_tiles, validate_hand
from mahjong_drill.waits import classify

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    yield


app = FastAPI(title="Mahjong Drill API", version="0.1.0", lifespan=lifespan)
repo = DrillRepository(ttl_hours=settings.drill_ttl_hours)
leaderboard = Leaderboard(limit=settings.leaderboard_limit)


def _codes(tiles: Iterable[Tile]) -> list[str]:
    return [t.code for t in tiles]


@app.get("/")
def root() -> dict[str, str]:
    return {
        "message": "Mahjong Drill API",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/v1/tenpai", response_model=TenpaiResponse)
def tenpai(req: HandRequest) -> TenpaiResponse:
    tiles = validate_hand(req.tiles, SUPPORTED_SIZES)
    result = detect_tenpai_sized(tiles, len(tiles))
    return TenpaiResponse(is_tenpai=result.is_tenpai, waiting_tiles=_codes(result.waiting_tiles), label=result.label)


@app.post("/api/v1/win", response_model=WinResponse)
def win(req: HandRequest) -> WinResponse:
    tiles = validate_hand(req.tiles, (14,))
    decomposition = find_decomposition(count_kinds(tiles), 4, need_pair=True)
    if decomposition is None:
        return WinResponse(is_winning=False)
    return WinResponse(
        is_winning=True,
        melds=[MeldOut(kind=m.kind, tiles=_codes(m.tiles)) for m in decomposition.melds],
        pair=decomposition.pair.code,
    )


@app.post("/api/v1/classify", response_model=ClassifyResponse)
def classify_waits(req: ClassifyRequest) -> ClassifyResponse:
    waiting = parse_tiles(req.waiting_tiles)
    hand = parse_tiles(req.tiles) if req.tiles else None
    return ClassifyResponse(label=classify(waiting, hand))


@app.post("/api/v1/discards", response_model=DiscardResponse)
def discards(req: HandRequest) -> DiscardResponse:
    tiles = validate_hand(req.tiles, DISCARD_SIZES)
    evaluation = evaluate_discards(tiles, len(tiles))
    return DiscardResponse(
        candidates=[
            DiscardCandidateOut(
                discarded=c.discarded.code,
                is_tenpai=c.is_tenpai,
                waiting_tiles=_codes(c.waiting_tiles),
                completing_count=c.completing_count,
                label=c.label,
            )
            for c in evaluation.candidates
        ],
        best_count=evaluation.best_count,
        best_discards=_codes(evaluation.best_discards),
    )


@app.post("/api/v1/generate", response_model=GeneratedHandResponse)
def generate_hand(req: GenerateRequest) -> GeneratedHandResponse:
    try:
        generated = generate(req.pattern, req.display_size)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return GeneratedHandResponse(
        hand=_codes(generated.hand),
        waiting_tiles=_codes(generated.waiting_tiles),
        label=generated.label,
        concealed=_codes(generated.concealed),
        fallback=generated.fallback,
    )


def _drill_response(record: StoredDrill) -> DrillResponse:
    return DrillResponse(
        drill_id=record.id,
        mode=record.data["mode"],
        difficulty=record.data["difficulty"],
        hand=record.data["hand"],
        concealed=record.data["concealed"],
        created_at=record.created_at,
        expires_at=record.expires_at,
    )


@app.post("/api/v1/drills/tenpai", response_model=DrillResponse)
def create_tenpai_drill(req: TenpaiDrillRequest) -> DrillResponse:
    generated = generate_tenpai_hand(req.display_size, req.difficulty)
    record = repo.create(
        "tenpai_drill",
        {
            "mode": "tenpai",
            "difficulty": req.difficulty.value,
            "tile_count": req.display_size,
            "hand": _codes(generated.hand),
            "concealed": _codes(generated.concealed),
            "answer": _codes(generated.waiting_tiles),
            "label": generated.label.value,
        },
    )
    logger.info("drill created", mode="tenpai", drill_id=str(record.id), label=generated.label)
    return _drill_response(record)


@app.post("/api/v1/drills/discard", response_model=DrillResponse)
def create_discard_drill(req: DiscardDrillRequest) -> DrillResponse:
    drill = generate_discard_hand(req.size, req.difficulty)
    record = repo.create(
        "discard_drill",
        {
            "mode": "discard",
            "difficulty": req.difficulty.value,
            "tile_count": req.size,
            "hand": _codes(drill.hand),
            "concealed": [],
            "answer": _codes(drill.evaluation.best_discards),
            "best_count": drill.evaluation.best_count,
        },
    )
    logger.info("drill created", mode="discard", drill_id=str(record.id), best_count=drill.evaluation.best_count)
    return _drill_response(record)


def _require(record: StoredDrill | None) -> StoredDrill:
    if not record:
        raise HTTPException(status_code=404, detail="drill not found or expired")
    return record


@app.get("/api/v1/drills/{drill_id}", response_model=DrillResponse)
def get_drill(drill_id: UUID) -> DrillResponse:
    return _drill_response(_require(repo.get(drill_id)))


@app.post("/api/v1/drills/{drill_id}/answer", response_model=AnswerResponse)
def answer_drill(drill_id: UUID, req: AnswerRequest) -> AnswerResponse:
    selected = parse_tiles(req.tiles)
    # answering uses the drill up; a second submission gets 404
    record = _require(repo.pop(drill_id))
    answer = parse_tiles(record.data["answer"])
    mode = record.data["mode"]

    if mode == "tenpai":
        grade = grade_tenpai_answer(selected, answer)
        response = AnswerResponse(
            drill_id=record.id,
            mode=mode,
            is_correct=grade.is_correct,
            score=grade.score,
            correct_selected=_codes(grade.correct_selected),
            incorrect_selected=_codes(grade.incorrect_selected),
            missed=_codes(grade.missed),
            answer=record.data["answer"],
            label=record.data["label"],
        )
    else:
        grade = grade_discard_answer(selected, answer)
        response = AnswerResponse(
            drill_id=record.id,
            mode=mode,
            is_correct=grade.is_correct,
            score=grade.score,
            correct_selected=_codes(grade.correct_selected),
            incorrect_selected=_codes(grade.incorrect_selected),
            answer=record.data["answer"],
            best_count=record.data["best_count"],
        )

    leaderboard.add(
        mode,
        response.score,
        req.elapsed_seconds,
        difficulty=record.data["difficulty"],
        config={"tile_count": record.data["tile_count"]},
    )
    logger.info("drill answered", mode=mode, drill_id=str(record.id), score=response.score)
    return response


@app.get("/api/v1/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(mode: str | None = None, limit: int | None = None) -> LeaderboardResponse:
    entries = leaderboard.entries(mode, limit)
    return LeaderboardResponse(
        entries=[
            LeaderboardEntryOut(
                id=e.id,
                mode=e.mode,
                score=e.score,
                time_seconds=e.time_seconds,
                difficulty=e.difficulty,
                config=e.config,
                recorded_at=e.recorded_at,
            )
            for e in entries
        ]
    )


@app.get("/api/v1/leaderboard/stats", response_model=LeaderboardStatsResponse)
def get_leaderboard_stats(mode: str | None = None) -> LeaderboardStatsResponse:
    stats = leaderboard.stats(mode)
    return LeaderboardStatsResponse(
        mode=mode,
        total_games=stats.total_games,
        average_score=stats.average_score,
        best_score=stats.best_score,
        average_time=stats.average_time,
    )
