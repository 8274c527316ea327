"""Generic grouping, ratio, ranking and join primitives.

These functions operate on pandas row sets and never mutate their inputs.
Conventions:
- grouping preserves first-appearance order of categorical keys
- temporal keys are emitted in ascending order (`order_by_time`)
- every ratio is guarded: a zero denominator or non-finite result is 0.0
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

GROWTH_COLUMNS = ["entity", "start_time", "end_time", "start_value", "end_value", "growth"]


# =========================================================
# RATIOS
# =========================================================

def safe_ratio(numerator: float, denominator: float) -> float:
    """Scalar division returning 0.0 instead of NaN/Infinity."""
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_divide(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Element-wise division with zero denominators and non-finite results set to 0.0."""
    num = numerator.astype(float)
    den = denominator.astype(float)
    result = num / den.where(den != 0)
    return result.replace([np.inf, -np.inf], np.nan).fillna(0.0)


def add_share(
    pdf: pd.DataFrame,
    numerator: str,
    denominator: str,
    out_col: str,
) -> pd.DataFrame:
    """Add ``numerator / (numerator + denominator)`` as `out_col`.

    The share is exactly 0.0 when both quantities are zero.
    """
    out = pdf.copy()
    num = out[numerator].astype(float)
    out[out_col] = safe_divide(num, num + out[denominator].astype(float))
    return out


# =========================================================
# GROUPING
# =========================================================

def order_by_time(pdf: pd.DataFrame, time_col: str) -> pd.DataFrame:
    """Stable ascending sort on a temporal key with a fresh index."""
    return pdf.sort_values(time_col, kind="mergesort").reset_index(drop=True)


def rank_by(pdf: pd.DataFrame, metric_col: str) -> pd.DataFrame:
    """Stable descending sort on `metric_col`; ties keep their current order."""
    rank = -pdf[metric_col].astype(float)
    return (
        pdf.assign(_rank=rank)
        .sort_values("_rank", kind="mergesort")
        .drop(columns="_rank")
        .reset_index(drop=True)
    )


def category_sums(
    pdf: pd.DataFrame,
    keys: Sequence[str],
    value_col: str,
    category_col: str,
    outputs: Mapping[str, str],
) -> pd.DataFrame:
    """Sum `value_col` per group, split into one column per category.

    Args:
        pdf: Row set with `keys`, `value_col` and `category_col`.
        keys: Group key columns (single or composite).
        value_col: Numeric column to sum.
        category_col: Column holding each row's category (or None).
        outputs: Output column → category label, e.g. ``{"sum_renew": "renewable"}``.

    Returns:
        DataFrame with `keys` plus one float column per output. Every group
        present in `pdf` appears once, in first-appearance order; a group
        with no rows of a category gets 0.0 for it.
    """
    keys = list(keys)
    if pdf.empty:
        return pd.DataFrame({**{k: pd.Series(dtype=object) for k in keys},
                             **{c: pd.Series(dtype=float) for c in outputs}})

    work = pdf[keys].copy()
    values = pdf[value_col].astype(float)
    for out_col, category in outputs.items():
        work[out_col] = values.where(pdf[category_col] == category, 0.0)

    return work.groupby(keys, sort=False, dropna=False).sum().reset_index()


def count_by(pdf: pd.DataFrame, keys: Sequence[str], out_col: str = "count") -> pd.DataFrame:
    """Count rows per group, groups in first-appearance order."""
    keys = list(keys)
    if pdf.empty:
        return pd.DataFrame({**{k: pd.Series(dtype=object) for k in keys}, out_col: pd.Series(dtype=int)})
    return pdf.groupby(keys, sort=False, dropna=False).size().reset_index(name=out_col)


# =========================================================
# RANKING
# =========================================================

def latest_snapshot(
    pdf: pd.DataFrame,
    entity_col: str,
    time_col: str,
    at: Any = None,
) -> pd.DataFrame:
    """Pick one row per entity at a time point.

    For each entity the row at `at` is used (defaults to the latest time in
    `pdf`); when the entity has no row there, its nearest earlier row is used,
    and failing that its earliest later row.

    Returns:
        One row per entity, in first-appearance order of the entities.
    """
    if pdf.empty:
        return pdf.copy()

    frame = pdf.reset_index(drop=True)
    target = frame[time_col].max() if at is None else at

    picked: list[int] = []
    for _, grp in frame.groupby(entity_col, sort=False):
        exact = grp[grp[time_col] == target]
        if not exact.empty:
            picked.append(exact.index[-1])
            continue
        earlier = grp[grp[time_col] < target]
        if not earlier.empty:
            picked.append(earlier[time_col].idxmax())
        else:
            picked.append(grp[time_col].idxmin())

    return frame.loc[picked].reset_index(drop=True)


def top_n(
    pdf: pd.DataFrame,
    entity_col: str,
    time_col: str,
    metric_col: str,
    n: int,
    at: Any = None,
) -> pd.DataFrame:
    """Select the `n` entities with the highest `metric_col` at a time point.

    Args:
        pdf: Per-entity time series.
        entity_col: Entity column (area, symbol, ...).
        time_col: Temporal column.
        metric_col: Derived quantity to rank on.
        n: Maximum number of entities to return.
        at: Time point; defaults to the latest in `pdf` (see `latest_snapshot`).

    Returns:
        At most `n` snapshot rows, highest metric first. Ties keep the
        entities' original order; entities with a missing metric never qualify.
    """
    if n <= 0 or pdf.empty:
        return pdf.iloc[0:0].reset_index(drop=True)

    snap = latest_snapshot(pdf, entity_col, time_col, at)
    snap = snap[snap[metric_col].notna()]
    return rank_by(snap, metric_col).head(n).reset_index(drop=True)


# =========================================================
# JOINS + GROWTH
# =========================================================

def join_on(
    left: pd.DataFrame,
    right: pd.DataFrame,
    key: str,
    require: Sequence[str] = (),
) -> pd.DataFrame:
    """Inner-join two aggregated series on a shared temporal key.

    Keys missing from either side produce no output; nothing is interpolated.
    Rows with a null in any `require` column are dropped too.

    Returns:
        Joined DataFrame sorted ascending by `key`.
    """
    joined = left.merge(right, on=key, how="inner")
    if require:
        joined = joined.dropna(subset=list(require))
    return order_by_time(joined, key)


def endpoint_growth(
    pdf: pd.DataFrame,
    entity_col: str,
    time_col: str,
    value_col: str,
) -> pd.DataFrame:
    """Compute ``(last - first) / first`` per entity.

    The first and last non-null observations in time order are used. An
    entity is excluded when it has fewer than two observations, when its
    first value is zero or non-finite, or when the result is non-finite.

    Returns:
        DataFrame with columns `entity`, `start_time`, `end_time`,
        `start_value`, `end_value`, `growth`, entities in first-appearance order.
    """
    rows: list[dict[str, Any]] = []
    if pdf.empty:
        return pd.DataFrame(columns=GROWTH_COLUMNS)

    for entity, grp in pdf.groupby(entity_col, sort=False):
        ordered = grp[grp[value_col].notna()].sort_values(time_col, kind="mergesort")
        if len(ordered) < 2:
            continue

        start = float(ordered[value_col].iloc[0])
        end = float(ordered[value_col].iloc[-1])
        if start == 0 or not math.isfinite(start):
            log.debug("Skipping growth for %s: first value is %r", entity, start)
            continue

        growth = (end - start) / start
        if not math.isfinite(growth):
            continue

        rows.append(
            {
                "entity": entity,
                "start_time": ordered[time_col].iloc[0],
                "end_time": ordered[time_col].iloc[-1],
                "start_value": start,
                "end_value": end,
                "growth": growth,
            }
        )

    return pd.DataFrame(rows, columns=GROWTH_COLUMNS)
