"""Application state owned by the composition root.

`AppState` holds the loaded row sets and the active selection and exposes
every chart view as a method. Views never read ambient globals: each
recomputes from the current row sets and selection by calling the pure
aggregation functions. A dataset that failed to load yields a `ChartView`
with `no_data` set, never rows from an earlier load.

Loads are guarded by a generation token so results that arrive after a newer
load started, or after the state was closed, are discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping

import pandas as pd
from pydantic import BaseModel

from dashboard_pipeline.aggregate.crypto import (
    annual_volatility,
    crypto_vs_clean_share,
    market_cap_vs_energy_growth,
)
from dashboard_pipeline.aggregate.energy import (
    continent_clean_share,
    energy_vs_gdp,
    global_energy_series,
    top_areas_by_clean_share,
)
from dashboard_pipeline.aggregate.missions import (
    MissionFilters,
    company_success_rate,
    filter_missions,
    launches_by_year_month,
    launches_by_year_status,
)
from dashboard_pipeline.aggregate.records import to_records
from dashboard_pipeline.aggregate.retail import monthly_sales, region_summary, retail_totals
from dashboard_pipeline.config import Settings
from dashboard_pipeline.ingest.load_rows import LoadResult, load_dataset, load_superstore
from dashboard_pipeline.models import (
    AreaRankingRecord,
    CompanySuccessRecord,
    ContinentShareRecord,
    CryptoShareRecord,
    EnergyGdpRecord,
    EnergyShareRecord,
    GrowthRecord,
    LaunchCountRecord,
    LaunchMonthRecord,
    MonthlySalesRecord,
    RegionRecord,
    RetailTotalsRecord,
)

log = logging.getLogger(__name__)

ALL = "All"
SOURCES = ("ember", "coins", "wdi", "missions", "superstore")
VIEW_NAMES = (
    "global_energy",
    "continent_shares",
    "continent_snapshot",
    "top_areas",
    "energy_vs_gdp",
    "crypto_vs_clean_share",
    "crypto_growth",
    "monthly_sales",
    "regions",
    "retail_totals",
    "launches_by_status",
    "launch_calendar",
    "company_success",
)


@dataclass(frozen=True)
class Selection:
    """Active dashboard selection.

    Attributes:
        year: Highlighted year (used by views that show a single year).
        continent: Continent filter, or "All".
        crypto: Symbol filter, or "All".
        country: Country for the WDI energy-vs-GDP view.
        top_n: Size of ranked views.
        growth_years: Years the crypto growth view spans; empty means all.
        missions: Mission filters.
    """
    year: int = 2023
    continent: str = ALL
    crypto: str = ALL
    country: str = "China"
    top_n: int = 5
    growth_years: tuple[int, ...] = ()
    missions: MissionFilters = field(default_factory=MissionFilters)


@dataclass(frozen=True)
class ChartView:
    """A view's records plus its load status."""
    name: str
    records: list[BaseModel] = field(default_factory=list)
    error: str | None = None

    @property
    def no_data(self) -> bool:
        return self.error is not None or not self.records

    def as_dicts(self) -> list[dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self.records]


class AppState:
    """Loaded row sets, current selection and chart views."""

    def __init__(self, settings: Settings, selection: Selection | None = None) -> None:
        self.settings = settings
        self.selection = selection or Selection(top_n=settings.top_n)
        self._results: dict[str, LoadResult] = {}
        self._generation = 0
        self._closed = False

    # -------------------------------------------------
    # Loading
    # -------------------------------------------------
    def begin_load(self) -> int:
        """Start a load and return its generation token."""
        self._generation += 1
        return self._generation

    def complete_load(self, token: int, results: Mapping[str, LoadResult]) -> bool:
        """Apply load results if `token` is still current.

        The previous result set is replaced entirely, so datasets that fail
        in this load do not keep serving earlier rows.

        Returns:
            True if applied; False if superseded or the state was closed.
        """
        if self._closed or token != self._generation:
            log.info("Discarding stale load results (token=%d current=%d closed=%s)",
                     token, self._generation, self._closed)
            return False
        self._results = dict(results)
        return True

    def load(self, loader: Callable[[str, Settings], LoadResult] | None = None) -> bool:
        """Load every source synchronously and apply the results."""
        token = self.begin_load()
        results = {name: self._load_source(name, loader) for name in SOURCES}
        return self.complete_load(token, results)

    def _load_source(self, name: str, loader: Callable[[str, Settings], LoadResult] | None) -> LoadResult:
        if loader is not None:
            return loader(name, self.settings)
        if name == "superstore":
            return load_superstore(self.settings)
        return load_dataset(name, self.settings)

    def close(self) -> None:
        """Stop accepting load results (the consumer went away)."""
        self._closed = True

    # -------------------------------------------------
    # Status + selection
    # -------------------------------------------------
    def result(self, name: str) -> LoadResult:
        """Return the current `LoadResult`; an unloaded source counts as failed."""
        return self._results.get(name) or LoadResult(name=name, error="not loaded")

    def error(self, name: str) -> str | None:
        return self.result(name).error

    def has_data(self, name: str) -> bool:
        res = self.result(name)
        return res.ok and not res.rows.empty

    def select(self, **changes: Any) -> Selection:
        """Replace fields of the active selection and return it."""
        self.selection = replace(self.selection, **changes)
        return self.selection

    def _view(self, name: str, sources: tuple[str, ...], build: Callable[[], list[BaseModel]]) -> ChartView:
        errors = [f"{s}: {self.error(s)}" for s in sources if self.error(s)]
        if errors:
            return ChartView(name=name, error="; ".join(errors))
        return ChartView(name=name, records=build())

    # -------------------------------------------------
    # Energy views
    # -------------------------------------------------
    def global_energy(self) -> ChartView:
        rows = self.result("ember").rows
        return self._view(
            "global_energy",
            ("ember",),
            lambda: to_records(global_energy_series(rows), EnergyShareRecord),
        )

    def continent_shares(self) -> ChartView:
        def build() -> list[BaseModel]:
            out = continent_clean_share(self.result("ember").rows, year_min=self.settings.year_min)
            if self.selection.continent != ALL:
                out = out[out["continent"] == self.selection.continent]
            return to_records(out, ContinentShareRecord)

        return self._view("continent_shares", ("ember",), build)

    def continent_snapshot(self) -> ChartView:
        """Continent shares restricted to the selected year."""
        def build() -> list[BaseModel]:
            out = continent_clean_share(self.result("ember").rows, year_min=self.settings.year_min)
            return to_records(out[out["year"] == self.selection.year], ContinentShareRecord)

        return self._view("continent_snapshot", ("ember",), build)

    def top_areas(self) -> ChartView:
        rows = self.result("ember").rows
        return self._view(
            "top_areas",
            ("ember",),
            lambda: to_records(
                top_areas_by_clean_share(
                    rows,
                    top_n_areas=self.selection.top_n,
                    year_min=self.settings.year_min,
                    volume_quantile=self.settings.volume_quantile,
                ),
                AreaRankingRecord,
            ),
        )

    def energy_vs_gdp(self) -> ChartView:
        rows = self.result("wdi").rows
        return self._view(
            "energy_vs_gdp",
            ("wdi",),
            lambda: to_records(energy_vs_gdp(rows, self.selection.country), EnergyGdpRecord),
        )

    # -------------------------------------------------
    # Crypto views
    # -------------------------------------------------
    def _crypto_joined(self) -> tuple[pd.DataFrame, pd.DataFrame]:
        series = global_energy_series(self.result("ember").rows)
        joined = crypto_vs_clean_share(series, annual_volatility(self.result("coins").rows))
        if self.selection.crypto != ALL:
            joined = joined[joined["symbol"] == self.selection.crypto]
        return series, joined

    def _growth_energy(self, series: pd.DataFrame) -> pd.DataFrame:
        """Yearly generation totals for the selected continent, else the global series."""
        if self.selection.continent == ALL:
            return series
        cont = continent_clean_share(self.result("ember").rows, year_min=self.settings.year_min)
        cont = cont[cont["continent"] == self.selection.continent]
        return cont.groupby("year", sort=True)["total"].sum().reset_index()

    def crypto_vs_clean_share(self) -> ChartView:
        def build() -> list[BaseModel]:
            _, joined = self._crypto_joined()
            return to_records(joined, CryptoShareRecord)

        return self._view("crypto_vs_clean_share", ("ember", "coins"), build)

    def crypto_growth(self) -> ChartView:
        def build() -> list[BaseModel]:
            series, joined = self._crypto_joined()
            if self.selection.growth_years:
                joined = joined[joined["year"].isin(self.selection.growth_years)]
            growth = market_cap_vs_energy_growth(joined, self._growth_energy(series))
            return to_records(growth, GrowthRecord)

        return self._view("crypto_growth", ("ember", "coins"), build)

    # -------------------------------------------------
    # Retail views
    # -------------------------------------------------
    def monthly_sales(self) -> ChartView:
        rows = self.result("superstore").rows
        return self._view("monthly_sales", ("superstore",), lambda: to_records(monthly_sales(rows), MonthlySalesRecord))

    def regions(self) -> ChartView:
        rows = self.result("superstore").rows
        return self._view("regions", ("superstore",), lambda: to_records(region_summary(rows), RegionRecord))

    def retail_totals(self) -> ChartView:
        def build() -> list[BaseModel]:
            rows = self.result("superstore").rows
            if rows.empty:
                return []
            return to_records([retail_totals(rows)], RetailTotalsRecord)

        return self._view("retail_totals", ("superstore",), build)

    # -------------------------------------------------
    # Mission views
    # -------------------------------------------------
    def _missions(self) -> Any:
        return filter_missions(self.result("missions").rows, self.selection.missions)

    def launches_by_status(self) -> ChartView:
        return self._view(
            "launches_by_status",
            ("missions",),
            lambda: to_records(launches_by_year_status(self._missions()), LaunchCountRecord),
        )

    def launch_calendar(self) -> ChartView:
        return self._view(
            "launch_calendar",
            ("missions",),
            lambda: to_records(launches_by_year_month(self._missions()), LaunchMonthRecord),
        )

    def company_success(self) -> ChartView:
        return self._view(
            "company_success",
            ("missions",),
            lambda: to_records(company_success_rate(self._missions(), rank=True), CompanySuccessRecord),
        )

    # -------------------------------------------------
    # Registry
    # -------------------------------------------------
    def views(self) -> dict[str, Callable[[], ChartView]]:
        """Name → view method, for generic consumers such as the CLI."""
        return {name: getattr(self, name) for name in VIEW_NAMES}
