"""Superstore order aggregations.

Input is the enriched order frame produced by
`dashboard_pipeline.clean.transform.enrich_orders`.
"""
from __future__ import annotations

from typing import Any

import pandas as pd

from dashboard_pipeline.aggregate.rollup import order_by_time, rank_by, safe_divide, safe_ratio

UNKNOWN = "Unknown"


def _label(series: pd.Series) -> pd.Series:
    """Replace blank labels with "Unknown" so no group key is empty."""
    return series.fillna("").astype(str).str.strip().replace("", UNKNOWN)


def monthly_sales(orders: pd.DataFrame) -> list[dict[str, Any]]:
    """Return sales and profit per calendar month with a per-category split.

    Returns:
        List of dicts with `month` (YYYY-MM), `sales`, `profit` and
        `by_category` (category → sales), ascending by month.
    """
    if orders.empty:
        return []

    pdf = orders.assign(
        month=[d.strftime("%Y-%m") for d in orders["order_date"]],
        category=_label(orders["category"]),
    )
    totals = pdf.groupby("month", sort=False)[["sales", "profit"]].sum().reset_index()
    totals = order_by_time(totals, "month")

    split = pdf.groupby(["month", "category"], sort=False)["sales"].sum()
    by_month: dict[str, dict[str, float]] = {}
    for (month, category), sales in split.items():
        by_month.setdefault(month, {})[category] = float(sales)

    return [
        {
            "month": rec["month"],
            "sales": float(rec["sales"]),
            "profit": float(rec["profit"]),
            "by_category": by_month.get(rec["month"], {}),
        }
        for rec in totals.to_dict(orient="records")
    ]


def region_summary(orders: pd.DataFrame) -> pd.DataFrame:
    """Return sales, profit and margin per region, highest sales first.

    Margin is profit / sales and is 0.0 for a region with zero sales.
    """
    cols = ["region", "sales", "profit", "margin"]
    if orders.empty:
        return pd.DataFrame(columns=cols)

    pdf = orders.assign(region=_label(orders["region"]))
    out = pdf.groupby("region", sort=False)[["sales", "profit"]].sum().reset_index()
    out["margin"] = safe_divide(out["profit"], out["sales"])
    return rank_by(out, "sales")[cols]


def retail_totals(orders: pd.DataFrame) -> dict[str, float]:
    """Return overall sales, profit, margin and order-level return rate.

    The return rate is the fraction of distinct order ids with at least one
    returned line.
    """
    if orders.empty:
        return {"sales": 0.0, "profit": 0.0, "margin": 0.0, "return_rate": 0.0}

    sales = float(orders["sales"].sum())
    profit = float(orders["profit"].sum())
    per_order = orders.groupby("order_id", sort=False)["returned"].any()
    return {
        "sales": sales,
        "profit": profit,
        "margin": safe_ratio(profit, sales),
        "return_rate": safe_ratio(float(per_order.sum()), float(len(per_order))),
    }
