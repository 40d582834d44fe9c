from mahjong_drill.grading import grade_discard_answer, grade_tenpai_answer
from mahjong_drill.tiles import parse_hand


def codes(tiles):
    return [t.code for t in tiles]


def test_exact_tenpai_answer():
    grade = grade_tenpai_answer(parse_hand("47p"), parse_hand("47p"))

    assert grade.is_correct
    assert grade.score == 70
    assert grade.accuracy == 100
    assert grade.missed == ()
    assert grade.incorrect_selected == ()


def test_extra_wrong_tile_costs_points():
    grade = grade_tenpai_answer(parse_hand("457p"), parse_hand("47p"))

    assert not grade.is_correct
    assert grade.score == 15
    assert codes(grade.incorrect_selected) == ["5p"]


def test_missed_tile():
    grade = grade_tenpai_answer(parse_hand("4p"), parse_hand("47p"))

    assert not grade.is_correct
    assert grade.score == 0
    assert grade.accuracy == 50
    assert codes(grade.missed) == ["7p"]


def test_score_never_negative():
    grade = grade_tenpai_answer([], parse_hand("147m"))

    assert grade.score == 0
    assert codes(grade.missed) == ["1m", "4m", "7m"]


def test_score_capped_at_hundred():
    grade = grade_tenpai_answer(parse_hand("123456789m"), parse_hand("123456789m"))

    assert grade.is_correct
    assert grade.score == 100


def test_duplicate_selections_count_once():
    grade = grade_tenpai_answer(parse_hand("447p"), parse_hand("47p"))

    assert grade.is_correct
    assert grade.score == 70


def test_best_discard_is_full_marks():
    assert grade_discard_answer(parse_hand("5s"), parse_hand("5s")).score == 100
    tie = grade_discard_answer(parse_hand("E"), parse_hand("ES"))
    assert tie.is_correct
    assert tie.score == 100


def test_mixed_discard_answer_is_partial():
    grade = grade_discard_answer(parse_hand("56s"), parse_hand("5s"))

    assert not grade.is_correct
    assert grade.score == 50
    assert codes(grade.incorrect_selected) == ["6s"]


def test_wrong_or_empty_discard_answer():
    assert grade_discard_answer(parse_hand("6s"), parse_hand("5s")).score == 0
    empty = grade_discard_answer([], parse_hand("5s"))
    assert not empty.is_correct
    assert empty.score == 0
