import pytest

from editrank.distance import full_table_distance, rolling_distance
from editrank.errors import InputTooLarge
from editrank.ranking import (
    Ranker,
    RankingResult,
    ScoredCandidate,
    format_hint,
    rank,
    select_top_k,
)


def test_rank_kitten_top_two():
    result = rank("kitten", ["sitting", "kitten", "mitten"], 2)
    assert isinstance(result, RankingResult)
    assert result.texts == ["kitten", "mitten"]
    assert result.items[0].score == 100.0
    assert result.items[1].score == pytest.approx(100 * 5 / 6)


def test_rank_returns_everything_when_k_exceeds_dataset():
    candidates = ["sitting", "kitten", "mitten", "bitten", "knitting"]
    result = rank("kitten", candidates, k=50)
    assert len(result) == len(candidates)
    scores = [item.score for item in result]
    assert scores == sorted(scores, reverse=True)
    assert sorted(result.texts) == sorted(candidates)


def test_equal_scores_keep_dataset_order():
    # every candidate is one substitution away from "abcd"
    candidates = ["xbcd", "axcd", "abxd", "abcx"]
    result = rank("abcd", candidates, k=3)
    assert result.texts == ["xbcd", "axcd", "abxd"]


def test_top_k_matches_full_stable_sort():
    scored = [ScoredCandidate(s, f"t{i}") for i, s in enumerate([5, 9, 5, 1, 9, 5, 0, 9])]
    expected = sorted(scored, key=lambda sc: sc.score, reverse=True)[:5]
    assert select_top_k(scored, 5) == expected


def test_empty_dataset_gives_empty_result():
    result = rank("kitten", [], k=10)
    assert result.items == []
    assert result.elapsed >= 0.0


def test_empty_query_scores_zero_and_truncates():
    candidates = ["a", "b", "c", "d"]
    result = rank("", candidates, k=2)
    assert result.texts == ["a", "b"]
    assert all(item.score == 0.0 for item in result)


def test_default_k_is_ten():
    candidates = [f"name{i}" for i in range(25)]
    assert len(rank("name", candidates)) == 10


@pytest.mark.parametrize("bad_k", [0, -1, 2.5, True])
def test_invalid_k_is_rejected(bad_k):
    with pytest.raises(ValueError):
        rank("a", ["a"], k=bad_k)


def test_strategies_are_interchangeable():
    candidates = ["Sol", "Solati", "Sothis", "Lave", "Leesti", "Diso", "Soliat"]
    a = rank("sola", candidates, 5, distance_fn=full_table_distance)
    b = rank("sola", candidates, 5, distance_fn=rolling_distance)
    assert a.items == b.items


def test_rank_propagates_input_too_large(monkeypatch):
    from editrank import config

    monkeypatch.setattr(config, "MAX_INPUT_LENGTH", 3)
    with pytest.raises(InputTooLarge):
        rank("abcd", ["ab"])


def test_format_hint():
    assert format_hint(ScoredCandidate(100.0, "kitten")) == "kitten (100.0%)"
    assert format_hint(ScoredCandidate(100 * 5 / 6, "mitten")) == "mitten (83.3%)"


def test_ranker_wraps_strategy():
    ranker = Ranker.from_strategy("full_table", k=1)
    assert ranker.description == "full_table"
    assert ranker.distance_fn is full_table_distance
    result = ranker.process("kitten", ["sitting", "mitten"])
    assert result.texts == ["mitten"]


def test_ranker_accepts_any_distance_callable():
    def same_length_only(a, b):
        return 0 if len(a) == len(b) else max(len(a), len(b))

    ranker = Ranker(same_length_only, k=2)
    assert ranker.description == "same_length_only"
    assert ranker.process("abc", ["abcd", "xyz", "q"]).texts == ["xyz", "abcd"]
