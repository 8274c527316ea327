from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from dashboard_pipeline.aggregate.rollup import (
    add_share,
    category_sums,
    count_by,
    endpoint_growth,
    join_on,
    latest_snapshot,
    order_by_time,
    rank_by,
    safe_divide,
    safe_ratio,
    top_n,
)


# --------------------------------------------------
# Ratios
# --------------------------------------------------
def test_safe_ratio_and_divide_never_return_nan() -> None:
    assert safe_ratio(1.0, 0.0) == 0.0
    assert safe_ratio(1.0, 4.0) == 0.25

    out = safe_divide(pd.Series([1.0, 0.0, np.inf]), pd.Series([0.0, 0.0, 1.0]))
    assert out.tolist() == [0.0, 0.0, 0.0]


def test_add_share_is_exactly_zero_when_both_parts_are_zero() -> None:
    pdf = pd.DataFrame({"a": [0.0, 10.0, 5.0], "b": [0.0, 30.0, 0.0]})
    out = add_share(pdf, "a", "b", "share")

    assert out["share"].tolist() == [0.0, 0.25, 1.0]
    assert "share" not in pdf.columns


# --------------------------------------------------
# Grouping
# --------------------------------------------------
def test_category_sums_preserve_totals_and_group_order() -> None:
    pdf = pd.DataFrame(
        {
            "area": ["B", "A", "B", "A", "B"],
            "value": [1.0, 2.0, 3.0, 4.0, 5.0],
            "kind": ["x", "y", None, "x", "x"],
        }
    )
    out = category_sums(pdf, ["area"], "value", "kind", {"sum_x": "x", "sum_y": "y"})

    assert out["area"].tolist() == ["B", "A"]
    assert out["sum_x"].tolist() == [6.0, 4.0]
    assert out["sum_y"].tolist() == [0.0, 2.0]
    # sum over groups equals the filtered whole
    assert out["sum_x"].sum() == pdf.loc[pdf["kind"] == "x", "value"].sum()


def test_category_sums_empty_input() -> None:
    pdf = pd.DataFrame(columns=["year", "value", "kind"])
    out = category_sums(pdf, ["year"], "value", "kind", {"sum_x": "x"})
    assert out.empty
    assert list(out.columns) == ["year", "sum_x"]


def test_count_by() -> None:
    pdf = pd.DataFrame({"year": [2020, 2019, 2020], "status": ["ok", "ok", "ok"]})
    out = count_by(pdf, ["year", "status"], out_col="n")
    assert out.to_dict(orient="records") == [
        {"year": 2020, "status": "ok", "n": 2},
        {"year": 2019, "status": "ok", "n": 1},
    ]


def test_order_by_time_is_ascending_and_stable() -> None:
    pdf = pd.DataFrame({"year": [2021, 2019, 2021, 2020], "tag": ["a", "b", "c", "d"]})
    out = order_by_time(pdf, "year")
    assert out["year"].tolist() == [2019, 2020, 2021, 2021]
    assert out["tag"].tolist() == ["b", "d", "a", "c"]


def test_rank_by_keeps_tie_order() -> None:
    pdf = pd.DataFrame({"k": ["a", "b", "c"], "m": [1.0, 2.0, 1.0]})
    assert rank_by(pdf, "m")["k"].tolist() == ["b", "a", "c"]


# --------------------------------------------------
# Ranking
# --------------------------------------------------
def _shares() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "area": ["A", "A", "B", "B", "C", "D"],
            "year": [2019, 2020, 2019, 2020, 2019, 2020],
            "share": [0.1, 0.5, 0.9, 0.5, 0.95, 0.2],
        }
    )


def test_latest_snapshot_falls_back_to_nearest_earlier() -> None:
    snap = latest_snapshot(_shares(), "area", "year")
    assert snap[["area", "year"]].values.tolist() == [["A", 2020], ["B", 2020], ["C", 2019], ["D", 2020]]


def test_latest_snapshot_uses_later_row_when_nothing_earlier() -> None:
    snap = latest_snapshot(_shares(), "area", "year", at=2018)
    assert snap["year"].tolist() == [2019, 2019, 2019, 2020]


def test_top_n_orders_descending_with_stable_ties() -> None:
    out = top_n(_shares(), "area", "year", "share", 3)

    assert out["area"].tolist() == ["C", "A", "B"]
    assert len(out) <= 3
    assert out["share"].min() >= 0.2  # D is the only area left out


def test_top_n_bounds() -> None:
    assert top_n(_shares(), "area", "year", "share", 0).empty
    assert len(top_n(_shares(), "area", "year", "share", 10)) == 4


# --------------------------------------------------
# Joins + growth
# --------------------------------------------------
def test_join_on_keeps_only_shared_keys() -> None:
    left = pd.DataFrame({"year": [2012, 2010, 2011], "a": [3.0, 1.0, 2.0]})
    right = pd.DataFrame({"year": [2011, 2012, 2013], "b": [20.0, 30.0, 40.0]})

    out = join_on(left, right, "year")

    assert out["year"].tolist() == [2011, 2012]
    assert out.loc[0, "a"] == 2.0 and out.loc[0, "b"] == 20.0


def test_join_on_drops_rows_missing_required_values() -> None:
    left = pd.DataFrame({"year": [2011, 2012], "a": [1.0, None]})
    right = pd.DataFrame({"year": [2011, 2012], "b": [1.0, 2.0]})
    assert join_on(left, right, "year", require=["a"])["year"].tolist() == [2011]


def test_endpoint_growth() -> None:
    pdf = pd.DataFrame(
        {
            "symbol": ["BTC", "BTC", "BTC", "ZERO", "ZERO", "ONE"],
            "year": [2021, 2019, 2020, 2019, 2020, 2020],
            "mcap": [300.0, 100.0, 150.0, 0.0, 50.0, 10.0],
        }
    )
    out = endpoint_growth(pdf, "symbol", "year", "mcap")

    assert out["entity"].tolist() == ["BTC"]
    rec = out.iloc[0]
    assert (rec["start_time"], rec["end_time"]) == (2019, 2021)
    assert rec["growth"] == pytest.approx(2.0)
