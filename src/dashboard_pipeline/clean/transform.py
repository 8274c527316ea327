"""Cleaning and derivation utilities.

Per-record hooks (`derive_*`) run between coercion and Pydantic validation and
fill fields that are computed rather than read, such as the calendar year of
a quote. `enrich_orders` joins the Superstore lookup tables onto validated
order rows.
"""
from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

log = logging.getLogger(__name__)


def derive_coin_fields(rec: dict[str, Any]) -> dict[str, Any]:
    """Add the quote's calendar `year`."""
    out = dict(rec)
    out["year"] = rec["date"].year
    return out


def derive_mission_fields(rec: dict[str, Any]) -> dict[str, Any]:
    """Add `year` and `month` (1-12) when the launch date is known."""
    out = dict(rec)
    d = rec.get("date")
    out["year"] = d.year if d is not None else None
    out["month"] = d.month if d is not None else None
    return out


def sort_by_date(pdf: pd.DataFrame, column: str = "date") -> pd.DataFrame:
    """Return `pdf` stably sorted by a date column with a fresh index."""
    return pdf.sort_values(column, kind="mergesort").reset_index(drop=True)


def enrich_orders(
    orders: pd.DataFrame,
    returns: pd.DataFrame,
    users: pd.DataFrame,
) -> pd.DataFrame:
    """Attach return flags, managers, lead times and margins to order rows.

    Args:
        orders: Validated order rows.
        returns: Validated return rows (`order_id`).
        users: Validated region → manager rows; the last entry per region wins.

    Returns:
        Copy of `orders` with extra columns:
        - `returned`: True when the order id appears in `returns`
        - `manager`: the region's manager, or "" when unassigned
        - `lead_time_days`: ship date minus order date in days (NaN when unknown)
        - `margin`: profit / sales, NaN when sales is 0
    """
    pdf = orders.copy()
    returned_ids = set(returns["order_id"]) if "order_id" in returns.columns else set()

    managers: dict[str, str] = {}
    if not users.empty:
        for region, manager in zip(users["region"], users["manager"]):
            managers[region] = manager

    pdf["returned"] = pdf["order_id"].isin(returned_ids)
    pdf["manager"] = pdf["region"].map(lambda r: managers.get(r, ""))

    lead = [
        float((ship - placed).days) if ship is not None and not pd.isna(ship) else np.nan
        for placed, ship in zip(pdf["order_date"], pdf["ship_date"])
    ]
    pdf["lead_time_days"] = pd.Series(lead, index=pdf.index, dtype=float)

    sales = pdf["sales"].astype(float)
    pdf["margin"] = (pdf["profit"].astype(float) / sales.where(sales != 0)).astype(float)

    log.info(
        "Enriched %d orders (%d returned, %d regions with managers)",
        len(pdf),
        int(pdf["returned"].sum()),
        len(managers),
    )
    return pdf
