import pytest

from editrank import config
from editrank.distance import full_table_distance
from editrank.errors import InputTooLarge
from editrank.similarity import similarity


def test_identical_strings_score_100():
    assert similarity("Sol", "Sol") == 100.0
    assert similarity("Sol", "sOL") == 100.0


def test_zero_length_scores_zero_not_100():
    assert similarity("", "x") == 0.0
    assert similarity("x", "") == 0.0
    assert similarity("", "") == 0.0


def test_normalised_by_longer_operand():
    assert similarity("kitten", "sitting") == pytest.approx(100 * 4 / 7)
    assert similarity("kitten", "mitten") == pytest.approx(100 * 5 / 6)
    assert similarity("abc", "xyz") == 0.0


def test_custom_distance_fn_is_used():
    calls = []

    def fake_distance(a, b):
        calls.append((a, b))
        return 1

    assert similarity("abcd", "abcd", distance_fn=fake_distance) == 75.0
    assert calls == [("abcd", "abcd")]


def test_score_stays_in_range():
    pairs = [("a", "bbbbbbbb"), ("Lave", "Leesti"), ("Diso", "diso"), ("Ä", "ä")]
    for a, b in pairs:
        s = similarity(a, b, distance_fn=full_table_distance)
        assert 0.0 <= s <= 100.0


def test_oversize_input_raises(monkeypatch):
    monkeypatch.setattr(config, "MAX_INPUT_LENGTH", 4)
    with pytest.raises(InputTooLarge):
        similarity("abcde", "")
