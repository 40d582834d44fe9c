from mahjong_drill.discard import DiscardEvaluation, completing_count, evaluate_discards
from mahjong_drill.tiles import parse_hand
from mahjong_drill.waits import WaitPattern


def codes(tiles):
    return [t.code for t in tiles]


def test_best_discard_maximises_completing_tiles():
    evaluation = evaluate_discards(parse_hand("123456789m11p556s"))

    assert codes(evaluation.best_discards) == ["5s"]
    assert evaluation.best_count == 8

    first = evaluation.candidates[0]
    assert first.discarded.code == "5s"
    assert codes(first.waiting_tiles) == ["4s", "7s"]
    assert first.label == WaitPattern.two_sided_wait

    second = evaluation.candidates[1]
    assert second.discarded.code == "6s"
    assert codes(second.waiting_tiles) == ["1p", "5s"]
    assert second.completing_count == 4
    assert second.label == WaitPattern.pair_wait

    assert all(not c.is_tenpai for c in evaluation.candidates[2:])


def test_no_discard_reaches_tenpai():
    hand = parse_hand("147m258p369sESWNP")
    evaluation = evaluate_discards(hand)

    assert evaluation.best_discards == ()
    assert evaluation.best_count == 0
    assert len(evaluation.candidates) == 14
    assert all(not c.is_tenpai and c.completing_count == 0 for c in evaluation.candidates)


def test_one_candidate_per_kind():
    evaluation = evaluate_discards(parse_hand("111m234m567m888p99s"))

    assert len(evaluation.candidates) == 9
    assert len({c.discarded for c in evaluation.candidates}) == 9


def test_ties_are_all_best():
    # keeping either honor leaves a single wait on the other
    evaluation = evaluate_discards(parse_hand("123m456m789m111pES"))

    assert codes(evaluation.best_discards) == ["E", "S"]
    assert evaluation.best_count == 3


def test_eight_tile_hand():
    evaluation = evaluate_discards(parse_hand("123m88s56p9s"))

    assert codes(evaluation.best_discards) == ["9s"]
    assert evaluation.best_count == 8


def test_ten_tile_hand_has_no_tenpai_discard():
    evaluation = evaluate_discards(parse_hand("123456m88s56p"))

    assert len(evaluation.candidates) == 9
    assert evaluation.best_discards == ()
    assert evaluation.best_count == 0


def test_unsupported_or_mismatched_size_is_empty():
    assert evaluate_discards(parse_hand("123456789m88s56p")) == DiscardEvaluation()
    assert evaluate_discards(parse_hand("123456789m11p556s"), 8) == DiscardEvaluation()


def test_completing_count_subtracts_held_copies():
    hand = parse_hand("123456789m11p55s")

    assert completing_count(hand, parse_hand("1p5s")) == 4
    assert completing_count(hand, parse_hand("4s7s")) == 8
    assert completing_count(hand, []) == 0
