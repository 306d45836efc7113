from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from stationclim.grouping import (
    any_missing_by_group,
    group_reduce,
    keys_where,
    summarize_by_group,
)


def _table(rows):
    return pd.DataFrame(rows, columns=["key", "val"])


def test_any_missing_by_group_basic_example():
    t = _table([("A", 5.0), ("A", np.nan), ("B", 3.0)])

    assert any_missing_by_group(t, "val", "key") == {"A": True, "B": False}


def test_empty_table_gives_empty_mapping():
    t = pd.DataFrame({"key": pd.Series([], dtype=object), "val": pd.Series([], dtype=float)})

    assert any_missing_by_group(t, "val", "key") == {}


def test_single_absent_row():
    t = _table([("only", None)])

    assert any_missing_by_group(t, "val", "key") == {"only": True}


def test_all_absent_group_is_true_and_all_present_is_false():
    t = _table([("X", np.nan), ("X", np.nan), ("Y", 1.0), ("Y", 2.0)])

    result = any_missing_by_group(t, "val", "key")
    assert result["X"] is True
    assert result["Y"] is False


def test_unseen_key_never_appears_and_keys_need_not_be_sorted():
    t = _table([("C", 1.0), ("A", np.nan), ("C", 2.0), ("B", 4.0), ("A", 3.0)])

    result = any_missing_by_group(t, "val", "key")
    assert set(result) == {"A", "B", "C"}
    assert "Z" not in result
    # First-appearance order.
    assert list(result) == ["C", "A", "B"]


def test_rows_with_absent_key_are_excluded():
    t = _table([("A", 1.0), (None, np.nan), (np.nan, 2.0)])

    assert any_missing_by_group(t, "val", "key") == {"A": False}


def test_scan_is_idempotent_and_does_not_mutate_input():
    t = _table([("A", 5.0), ("A", np.nan), ("B", 3.0)])
    before = t.copy()

    first = any_missing_by_group(t, "val", "key")
    second = any_missing_by_group(t, "val", "key")

    assert first == second
    pd.testing.assert_frame_equal(t, before)


def test_filtered_keys_match_independent_scan():
    rng = np.random.default_rng(7)
    keys = rng.choice(list("ABCDEFG"), size=200)
    vals = rng.normal(size=200)
    vals[rng.random(200) < 0.05] = np.nan
    t = pd.DataFrame({"key": keys, "val": vals})

    flagged = set(keys_where(any_missing_by_group(t, "val", "key"), True))

    expected = set()
    for k, v in zip(keys, vals):
        if math.isnan(v):
            expected.add(k)
    assert flagged == expected


def test_missing_column_raises_key_error():
    t = _table([("A", 1.0)])

    with pytest.raises(KeyError, match="missing required columns"):
        any_missing_by_group(t, "nope", "key")


def test_group_reduce_generic_count_and_max():
    t = _table([("A", 1.0), ("A", 4.0), ("B", 2.0)])

    counts = group_reduce(t, "key", "val", predicate=lambda v: 1, combine=lambda a, b: a + b, initial=0)
    maxima = group_reduce(t, "key", "val", predicate=float, combine=max, initial=float("-inf"))

    assert counts == {"A": 2, "B": 1}
    assert maxima == {"A": 4.0, "B": 2.0}


def test_keys_where_false():
    assert keys_where({"A": True, "B": False, "C": False}, False) == ["B", "C"]


def test_summarize_by_group_propagates_absent_unless_skipna():
    t = _table([("A", 1.0), ("A", np.nan), ("A", 3.0), ("B", 2.0), ("B", 4.0)])

    strict = summarize_by_group(t, "key", "val", "mean")
    lenient = summarize_by_group(t, "key", "val", "mean", skipna=True)

    assert math.isnan(strict["A"])
    assert strict["B"] == pytest.approx(3.0)
    assert lenient["A"] == pytest.approx(2.0)

    assert summarize_by_group(t, "key", "val", "count") == {"A": 2, "B": 2}
    assert summarize_by_group(t, "key", "val", "sum", skipna=True)["A"] == pytest.approx(4.0)
    assert summarize_by_group(t, "key", "val", "max", skipna=True)["A"] == pytest.approx(3.0)
    assert math.isnan(summarize_by_group(t, "key", "val", "min")["A"])


def test_summarize_by_group_rejects_unknown_aggregation():
    t = _table([("A", 1.0)])

    with pytest.raises(ValueError, match="unsupported aggregation"):
        summarize_by_group(t, "key", "val", "median")


def test_summarize_by_group_count_is_integer():
    t = _table([("A", 1.0), ("A", np.nan), ("B", np.nan)])

    counts = summarize_by_group(t, "key", "val", "count")

    assert counts == {"A": 1, "B": 0}
    assert all(type(v) is int for v in counts.values())
    assert isinstance(summarize_by_group(t, "key", "val", "mean", skipna=True)["A"], float)
