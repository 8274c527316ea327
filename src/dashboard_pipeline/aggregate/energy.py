"""Electricity-mix aggregations over Ember rows.

Functions in this module reduce validated `EnergyRow` sets into clean-share
series. Generation classified as renewable is summed into `sum_renew`, fossil
into `sum_fossil`; rows matching neither keyword set are excluded from both.

Expectations:
- Input: a DataFrame with `area`, `year`, `variable`, `subcategory`, `value`
- Outputs: DataFrames whose columns match the corresponding record models
"""
from __future__ import annotations

import logging
from typing import Mapping, Sequence

import pandas as pd

from dashboard_pipeline.aggregate.classify import (
    ENERGY_FIELDS,
    ENERGY_RULES,
    FOSSIL,
    RENEWABLE,
    Rule,
    classify_frame,
)
from dashboard_pipeline.aggregate.continents import CONTINENT_MAP
from dashboard_pipeline.aggregate.rollup import (
    add_share,
    category_sums,
    join_on,
    latest_snapshot,
    order_by_time,
    top_n,
)

log = logging.getLogger(__name__)

SHARE_OUTPUTS = {"sum_renew": RENEWABLE, "sum_fossil": FOSSIL}
SERIES_COLUMNS = ["year", "total", "sum_renew", "sum_fossil", "clean_share"]


def _share_rollup(rows: pd.DataFrame, keys: Sequence[str], rules: Sequence[Rule]) -> pd.DataFrame:
    """Classify rows, sum renewable/fossil per group and add total + clean_share."""
    tagged = classify_frame(rows, ENERGY_FIELDS, rules)
    sums = category_sums(tagged, keys, "value", "kind", SHARE_OUTPUTS)
    sums["total"] = sums["sum_renew"] + sums["sum_fossil"]
    return add_share(sums, "sum_renew", "sum_fossil", "clean_share")


# =========================================================
# GLOBAL
# =========================================================

def global_energy_series(rows: pd.DataFrame, rules: Sequence[Rule] = ENERGY_RULES) -> pd.DataFrame:
    """Return the yearly renewable/fossil split across all areas.

    Args:
        rows: Validated Ember rows.
        rules: Classification rules (renewable before fossil).

    Returns:
        DataFrame with columns `year`, `total`, `sum_renew`, `sum_fossil`,
        `clean_share`, ascending by year. Years with no classified generation
        are omitted.
    """
    out = _share_rollup(rows, ["year"], rules)
    out = out[out["total"] > 0]
    return order_by_time(out, "year")[SERIES_COLUMNS]


# =========================================================
# PER AREA / CONTINENT
# =========================================================

def area_energy_series(
    rows: pd.DataFrame,
    key: str = "area",
    rules: Sequence[Rule] = ENERGY_RULES,
) -> pd.DataFrame:
    """Return the renewable/fossil split per (`key`, year).

    Groups keep first-appearance order of `key` and are ascending by year.
    Groups with zero total are kept so callers can see the full coverage.
    """
    out = _share_rollup(rows, [key, "year"], rules)
    return order_by_time(out, "year")[[key, *SERIES_COLUMNS]]


def continent_clean_share(
    rows: pd.DataFrame,
    year_min: int = 2000,
    continent_map: Mapping[str, str] = CONTINENT_MAP,
    rules: Sequence[Rule] = ENERGY_RULES,
) -> pd.DataFrame:
    """Compute clean share per continent and year.

    Args:
        rows: Validated Ember rows.
        year_min: Earliest year to include.
        continent_map: Area → continent table; unmapped areas are dropped.
        rules: Classification rules.

    Returns:
        DataFrame with columns `continent`, `year`, `total`, `sum_renew`,
        `sum_fossil`, `clean_share`, ascending by year; continent-years with
        zero total are omitted.
    """
    base = rows[rows["year"] >= year_min].copy()
    base["continent"] = base["area"].map(continent_map)
    base = base[base["continent"].notna()]
    if base.empty:
        log.info("No mapped areas at or after %d for continent series", year_min)

    out = area_energy_series(base, key="continent", rules=rules)
    return out[out["total"] > 0].reset_index(drop=True)


def top_areas_by_clean_share(
    rows: pd.DataFrame,
    top_n_areas: int = 5,
    year_min: int = 2000,
    volume_quantile: float = 0.85,
    rules: Sequence[Rule] = ENERGY_RULES,
) -> pd.DataFrame:
    """Rank large-volume areas by clean share at the most recent year.

    An area qualifies when its total at the ranking year (its latest year if it
    has no data then) is positive and at least the `volume_quantile` quantile
    of all such totals. Qualifying areas are ranked with `top_n`.

    Returns:
        DataFrame with columns `area`, `year`, `total`, `clean_share`, highest
        share first, at most `top_n_areas` rows.
    """
    cols = ["area", "year", "total", "clean_share"]
    per_area = area_energy_series(rows[rows["year"] >= year_min], key="area", rules=rules)
    if per_area.empty:
        return pd.DataFrame(columns=cols)

    last_year = per_area["year"].max()
    snap = latest_snapshot(per_area, "area", "year", at=last_year)
    snap = snap[snap["total"] > 0]
    if snap.empty:
        return pd.DataFrame(columns=cols)

    threshold = float(snap["total"].quantile(volume_quantile))
    qualifying = set(snap.loc[snap["total"] >= threshold, "area"])
    log.debug("Volume threshold %.3f keeps %d of %d areas", threshold, len(qualifying), len(snap))

    ranked = top_n(
        per_area[per_area["area"].isin(qualifying)],
        "area",
        "year",
        "clean_share",
        top_n_areas,
        at=last_year,
    )
    return ranked[cols]


# =========================================================
# INDICATORS (WDI)
# =========================================================

def energy_vs_gdp(wdi: pd.DataFrame, country: str = "China") -> pd.DataFrame:
    """Join a country's energy use per capita to its GDP per capita by year.

    Args:
        wdi: Validated WDI rows.
        country: Country name as it appears in `country_name`.

    Returns:
        DataFrame with columns `year`, `energy_per_capita_kg`, `gdp_per_capita`,
        ascending by year; only years where both indicators are positive.
    """
    cols = ["year", "energy_per_capita_kg", "gdp_per_capita"]
    if wdi.empty:
        return pd.DataFrame(columns=cols)

    mine = wdi[wdi["country_name"] == country]
    euse = mine[mine["series_name"].str.contains("Energy use", regex=False)]
    gdp = mine[mine["series_name"].str.contains("GDP per capita", regex=False)]

    left = euse[["year", "value"]].rename(columns={"value": "energy_per_capita_kg"})
    right = gdp[["year", "value"]].rename(columns={"value": "gdp_per_capita"})
    # one value per year and indicator; keep the first listed
    left = left.drop_duplicates("year")
    right = right.drop_duplicates("year")

    out = join_on(left, right, "year", require=cols)
    out = out[(out["energy_per_capita_kg"] > 0) & (out["gdp_per_capita"] > 0)]
    return out[cols].reset_index(drop=True)
