from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from mahjong_drill.tiles import Tile, sort_tiles

CORRECT_POINTS = 10
WRONG_PENALTY = 5
MISSED_PENALTY = 10
PERFECT_BONUS = 50
MAX_SCORE = 100
PARTIAL_DISCARD_SCORE = 50


@dataclass(frozen=True)
class TenpaiGrade:
    is_correct: bool
    score: int
    accuracy: float
    correct_selected: tuple[Tile, ...]
    incorrect_selected: tuple[Tile, ...]
    missed: tuple[Tile, ...]


@dataclass(frozen=True)
class DiscardGrade:
    is_correct: bool
    score: int
    correct_selected: tuple[Tile, ...]
    incorrect_selected: tuple[Tile, ...]


def _split(selected: Iterable[Tile], answer: set[Tile]) -> tuple[tuple[Tile, ...], tuple[Tile, ...]]:
    chosen = sort_tiles(set(selected))
    return tuple(t for t in chosen if t in answer), tuple(t for t in chosen if t not in answer)


def grade_tenpai_answer(selected: Iterable[Tile], waiting: Iterable[Tile]) -> TenpaiGrade:
    """Grade a guessed waiting set: +10 per hit, -5 per wrong kind, -10 per miss, +50 if exact, clamped to 0-100."""
    answer = set(waiting)
    correct, incorrect = _split(selected, answer)
    missed = tuple(sort_tiles(answer - set(correct)))
    is_correct = not incorrect and not missed

    score = len(correct) * CORRECT_POINTS - len(incorrect) * WRONG_PENALTY - len(missed) * MISSED_PENALTY
    if is_correct:
        score += PERFECT_BONUS
    accuracy = len(correct) / len(answer) * 100 if answer else 0.0
    return TenpaiGrade(
        is_correct=is_correct,
        score=max(0, min(MAX_SCORE, score)),
        accuracy=accuracy,
        correct_selected=correct,
        incorrect_selected=incorrect,
        missed=missed,
    )


def grade_discard_answer(selected: Iterable[Tile], best_discards: Iterable[Tile]) -> DiscardGrade:
    """Any best discard and nothing else is correct (100); a mix of right and wrong earns 50."""
    correct, incorrect = _split(selected, set(best_discards))
    is_correct = bool(correct) and not incorrect
    if is_correct:
        score = MAX_SCORE
    elif correct:
        score = PARTIAL_DISCARD_SCORE
    else:
        score = 0
    return DiscardGrade(
        is_correct=is_correct,
        score=score,
        correct_selected=correct,
        incorrect_selected=incorrect,
    )
