import random

import pytest

from editrank import config
from editrank.distance import (
    STRATEGIES,
    check_length,
    distance,
    full_table_distance,
    get_strategy,
    rolling_distance,
)
from editrank.errors import InputTooLarge


ALL_STRATEGIES = sorted(STRATEGIES.items())


@pytest.mark.parametrize("name,fn", ALL_STRATEGIES)
def test_textbook_examples(name, fn):
    assert fn("kitten", "sitting") == 3
    assert fn("kitten", "mitten") == 1
    assert fn("flaw", "lawn") == 2
    assert fn("intention", "execution") == 5


@pytest.mark.parametrize("name,fn", ALL_STRATEGIES)
def test_empty_operands_cost_the_other_length(name, fn):
    assert fn("", "abc") == 3
    assert fn("abc", "") == 3
    assert fn("", "") == 0


@pytest.mark.parametrize("name,fn", ALL_STRATEGIES)
def test_comparison_ignores_case(name, fn):
    assert fn("Sol", "SOL") == 0
    assert fn("Alpha Centauri", "alpha centauri") == 0
    assert fn("ABC", "abd") == 1


@pytest.mark.parametrize("name,fn", ALL_STRATEGIES)
def test_identity_symmetry_and_bounds(name, fn):
    rng = random.Random(7)
    for _ in range(200):
        a = "".join(rng.choice("abcde") for _ in range(rng.randint(0, 12)))
        b = "".join(rng.choice("abcde") for _ in range(rng.randint(0, 12)))
        d = fn(a, b)
        assert fn(a, a) == 0
        assert d == fn(b, a)
        assert abs(len(a) - len(b)) <= d <= max(len(a), len(b))


def test_full_table_and_rolling_agree_on_random_pairs():
    rng = random.Random(20240517)
    alphabet = "abcdefgXYZ 019-"
    for _ in range(1200):
        a = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 24)))
        b = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 24)))
        assert full_table_distance(a, b) == rolling_distance(a, b), (a, b)


def test_distance_dispatches_by_strategy_name():
    assert distance("kitten", "sitting", strategy="full_table") == 3
    assert distance("kitten", "sitting", strategy="rolling") == 3
    assert distance("kitten", "sitting") == 3


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        get_strategy("bk_tree")


def test_length_bound(monkeypatch):
    monkeypatch.setattr(config, "MAX_INPUT_LENGTH", 8)
    for fn in (full_table_distance, rolling_distance):
        assert fn("a" * 8, "b" * 7) == 8
        with pytest.raises(InputTooLarge) as exc:
            fn("a" * 9, "b")
        assert exc.value.length == 9
        assert exc.value.limit == 8
        with pytest.raises(InputTooLarge):
            fn("b", "a" * 9)


def test_default_bound_fits_31_bits():
    assert config.MAX_INPUT_LENGTH == 2**31 - 1


def test_check_length_reads_bound_at_call_time(monkeypatch):
    check_length("a" * 20)
    monkeypatch.setattr(config, "MAX_INPUT_LENGTH", 3)
    check_length("abc", "", "xyz")
    with pytest.raises(InputTooLarge):
        check_length("abc", "abcd")
