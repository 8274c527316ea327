"""Cryptocurrency aggregations and their join to the energy series."""
from __future__ import annotations

import logging
import math
from typing import Any

import numpy as np
import pandas as pd

from dashboard_pipeline.aggregate.rollup import (
    endpoint_growth,
    join_on,
    order_by_time,
    rank_by,
    safe_ratio,
)

log = logging.getLogger(__name__)

VOLATILITY_COLUMNS = ["symbol", "year", "vol_ann", "mcap"]
JOINED_COLUMNS = ["year", "symbol", "clean_share", "vol_ann", "mcap"]
GROWTH_COLUMNS = [
    "symbol",
    "start_year",
    "end_year",
    "start_mcap",
    "end_mcap",
    "mcap_growth",
    "start_energy",
    "end_energy",
    "energy_growth",
]


def annual_volatility(coins: pd.DataFrame, periods_per_year: int = 365) -> pd.DataFrame:
    """Annualised volatility and mean market cap per symbol and year.

    Volatility is the sample standard deviation (n-1) of consecutive log
    returns of positive closes (date order) times sqrt(`periods_per_year`).
    A symbol-year with fewer than two closes is skipped; one with a single
    return gets 0.0. Missing market caps
    count as 0 in the mean.

    Args:
        coins: Validated coin rows.
        periods_per_year: Observation frequency; 365 for daily crypto quotes.

    Returns:
        DataFrame with columns `symbol`, `year`, `vol_ann`, `mcap`, ascending by year.
    """
    rows: list[dict[str, Any]] = []
    if coins.empty:
        return pd.DataFrame(columns=VOLATILITY_COLUMNS)

    for (symbol, year), grp in coins.groupby(["symbol", "year"], sort=False):
        ordered = grp.sort_values("date", kind="mergesort")
        closes = ordered["close"].astype(float).to_numpy()
        closes = closes[closes > 0]
        if closes.size < 2:
            continue

        rets = np.log(closes[1:] / closes[:-1])
        rets = rets[np.isfinite(rets)]
        if rets.size == 0:
            continue

        vol_ann = 0.0
        if rets.size > 1:
            vol_ann = float(np.std(rets, ddof=1)) * math.sqrt(periods_per_year)
        mcap = float(pd.to_numeric(ordered["marketcap"], errors="coerce").fillna(0.0).mean())
        rows.append({"symbol": symbol, "year": int(year), "vol_ann": vol_ann, "mcap": mcap})

    return order_by_time(pd.DataFrame(rows, columns=VOLATILITY_COLUMNS), "year")


def crypto_vs_clean_share(energy_series: pd.DataFrame, volatility: pd.DataFrame) -> pd.DataFrame:
    """Pair each symbol-year's volatility with that year's global clean share.

    Inner join on `year`: years missing from either side are dropped. Rows
    with zero volatility are excluded.

    Returns:
        DataFrame with columns `year`, `symbol`, `clean_share`, `vol_ann`, `mcap`.
    """
    if energy_series.empty or volatility.empty:
        return pd.DataFrame(columns=JOINED_COLUMNS)

    joined = join_on(volatility, energy_series[["year", "clean_share"]], "year", require=["clean_share"])
    joined = joined[joined["vol_ann"] > 0]
    return joined[JOINED_COLUMNS].reset_index(drop=True)


def market_cap_vs_energy_growth(joined: pd.DataFrame, energy_series: pd.DataFrame) -> pd.DataFrame:
    """Compare each symbol's market-cap growth with global generation growth.

    Both growths use each symbol's first and last joined years and are
    ``(last - first) / first``. A symbol is excluded when either growth is
    undefined (zero/missing start).

    Returns:
        DataFrame with `GROWTH_COLUMNS`, highest market-cap growth first.
    """
    if joined.empty or energy_series.empty:
        return pd.DataFrame(columns=GROWTH_COLUMNS)

    total_by_year = dict(zip(energy_series["year"], energy_series["total"]))
    mcap_growth = endpoint_growth(joined, "symbol", "year", "mcap")

    rows: list[dict[str, Any]] = []
    for rec in mcap_growth.to_dict(orient="records"):
        start_energy = total_by_year.get(rec["start_time"])
        end_energy = total_by_year.get(rec["end_time"])
        if not start_energy or end_energy is None:
            log.debug("Skipping %s: no generation total for %s", rec["entity"], rec["start_time"])
            continue

        rows.append(
            {
                "symbol": rec["entity"],
                "start_year": int(rec["start_time"]),
                "end_year": int(rec["end_time"]),
                "start_mcap": rec["start_value"],
                "end_mcap": rec["end_value"],
                "mcap_growth": rec["growth"],
                "start_energy": float(start_energy),
                "end_energy": float(end_energy),
                "energy_growth": safe_ratio(float(end_energy) - float(start_energy), float(start_energy)),
            }
        )

    return rank_by(pd.DataFrame(rows, columns=GROWTH_COLUMNS), "mcap_growth")
