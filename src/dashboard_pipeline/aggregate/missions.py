"""Space-mission aggregations and selection filters."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import pandas as pd

from dashboard_pipeline.aggregate.classify import (
    FAILURE,
    MISSION_FIELDS,
    MISSION_RULES,
    SUCCESS,
    classify_frame,
)
from dashboard_pipeline.aggregate.rollup import add_share, category_sums, count_by, order_by_time, rank_by


@dataclass(frozen=True)
class MissionFilters:
    """Active selection; an empty tuple means "no restriction"."""
    companies: tuple[str, ...] = field(default_factory=tuple)
    years: tuple[int, ...] = field(default_factory=tuple)
    statuses: tuple[str, ...] = field(default_factory=tuple)


def normalize_mission_filters(
    companies: Optional[Iterable[object]] = None,
    years: Optional[Iterable[object]] = None,
    statuses: Optional[Iterable[object]] = None,
) -> MissionFilters:
    """Build `MissionFilters` from loosely typed input, skipping unusable values."""
    year_list: list[int] = []
    for y in years or []:
        try:
            year_list.append(int(y))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            continue
    return MissionFilters(
        companies=tuple(str(c).strip() for c in (companies or []) if c is not None and str(c).strip()),
        years=tuple(year_list),
        statuses=tuple(str(s).strip() for s in (statuses or []) if s is not None and str(s).strip()),
    )


def filter_missions(missions: pd.DataFrame, filters: MissionFilters) -> pd.DataFrame:
    """Return the rows passing every active filter."""
    mask = pd.Series(True, index=missions.index)
    if filters.companies:
        mask &= missions["company"].isin(filters.companies)
    if filters.years:
        mask &= missions["year"].isin(filters.years)
    if filters.statuses:
        mask &= missions["status_mission"].isin(filters.statuses)
    return missions[mask].reset_index(drop=True)


def mission_facets(missions: pd.DataFrame) -> dict[str, list]:
    """Distinct sorted companies, known years and mission statuses."""
    if missions.empty:
        return {"companies": [], "years": [], "statuses": []}
    return {
        "companies": sorted(set(missions["company"])),
        "years": sorted({int(y) for y in missions["year"].dropna()}),
        "statuses": sorted(set(missions["status_mission"])),
    }


def _dated(missions: pd.DataFrame) -> pd.DataFrame:
    """Rows with a known launch date, `year`/`month` as ints."""
    dated = missions[missions["year"].notna() & missions["month"].notna()].copy()
    dated["year"] = dated["year"].astype(int)
    dated["month"] = dated["month"].astype(int)
    dated["cost"] = pd.to_numeric(dated["cost"], errors="coerce")
    return dated


def launches_by_year_status(missions: pd.DataFrame) -> pd.DataFrame:
    """Count launches per (year, mission status), ascending by year.

    Launches without a known date are not counted.
    """
    cols = ["year", "status", "launches"]
    if missions.empty:
        return pd.DataFrame(columns=cols)

    counts = count_by(_dated(missions), ["year", "status_mission"], out_col="launches")
    counts = counts.rename(columns={"status_mission": "status"})
    return order_by_time(counts, "year")[cols]


def launches_by_year_month(missions: pd.DataFrame) -> pd.DataFrame:
    """Launch count and mean known cost per (year, month), ascending by year then month.

    `mean_cost` averages the launches with a reported cost and is 0.0 when
    none in the cell reported one.
    """
    cols = ["year", "month", "launches", "mean_cost"]
    if missions.empty:
        return pd.DataFrame(columns=cols)

    dated = _dated(missions)
    if dated.empty:
        return pd.DataFrame(columns=cols)

    grouped = dated.groupby(["year", "month"], sort=True)
    out = grouped.size().reset_index(name="launches")
    out["mean_cost"] = grouped["cost"].mean().fillna(0.0).to_numpy()
    return out[cols]


def company_success_rate(missions: pd.DataFrame, rank: bool = False) -> pd.DataFrame:
    """Success/failure counts and success rate per company.

    Statuses are classified with the mission rules ("Success" vs any
    "...Failure"); the rate is successes / (successes + failures) and 0.0 for
    a company with neither.

    Args:
        missions: Validated mission rows.
        rank: Sort by success rate descending instead of first appearance.
    """
    cols = ["company", "successes", "failures", "success_rate"]
    if missions.empty:
        return pd.DataFrame(columns=cols)

    tagged = classify_frame(missions.assign(one=1.0), MISSION_FIELDS, MISSION_RULES)
    sums = category_sums(tagged, ["company"], "one", "kind", {"successes": SUCCESS, "failures": FAILURE})
    out = add_share(sums, "successes", "failures", "success_rate")
    out["successes"] = out["successes"].astype(int)
    out["failures"] = out["failures"].astype(int)
    if rank:
        out = rank_by(out, "success_rate")
    return out[cols]
