import math

import numpy as np
import pandas as pd
import pytest

from stationclim.missing import (
    count_missing,
    normalize_sentinel,
    rows_with_missing,
    safe_mean,
    safe_sum,
)


def test_normalize_sentinel_replaces_only_listed_columns():
    df = pd.DataFrame({"tpcp": [280, -9999, 15], "elev": [-9999, 1.0, 2.0]})

    out = normalize_sentinel(df, ["tpcp"])

    assert out["tpcp"].isna().tolist() == [False, True, False]
    assert out["elev"].iloc[0] == -9999
    # Input untouched.
    assert df["tpcp"].iloc[1] == -9999


def test_normalize_sentinel_custom_value_and_unknown_column():
    df = pd.DataFrame({"v": [0.0, -1.0, 3.0]})

    assert normalize_sentinel(df, ["v"], sentinel=-1)["v"].isna().sum() == 1
    with pytest.raises(KeyError):
        normalize_sentinel(df, ["nope"])


def test_count_and_rows_with_missing():
    df = pd.DataFrame({"a": [1.0, np.nan, 3.0], "b": [np.nan, np.nan, 1.0], "c": ["x", "y", "z"]})

    assert count_missing(df) == {"a": 1, "b": 2, "c": 0}
    assert count_missing(df, ["a"]) == {"a": 1}
    assert rows_with_missing(df, ["a"])["c"].tolist() == ["y"]
    assert len(rows_with_missing(df, ["a", "b"])) == 2


def test_absent_values_need_explicit_opt_in():
    s = pd.Series([1.0, np.nan, 3.0])

    assert math.isnan(safe_sum(s))
    assert math.isnan(safe_mean(s))
    assert safe_sum(s, skipna=True) == pytest.approx(4.0)
    assert safe_mean(s, skipna=True) == pytest.approx(2.0)


def test_safe_helpers_on_empty_input():
    assert math.isnan(safe_sum(pd.Series([], dtype=float)))
    assert math.isnan(safe_mean(pd.Series([], dtype=float)))
