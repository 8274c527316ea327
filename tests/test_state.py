from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable

import pandas as pd
import pytest

from dashboard_pipeline.aggregate.missions import MissionFilters
from dashboard_pipeline.config import Settings
from dashboard_pipeline.ingest.load_rows import DATASETS, LoadResult
from dashboard_pipeline.models import OrderRow
from dashboard_pipeline.state import SOURCES, VIEW_NAMES, AppState, ChartView

Loader = Callable[[str, Settings], LoadResult]


def _ember(*rows: tuple) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"area": a, "year": y, "category": "", "subcategory": "", "variable": v, "unit": "TWh", "value": x}
            for a, y, v, x in rows
        ],
        columns=list(DATASETS["ember"].model.model_fields),
    )


def _loader(tables: dict[str, pd.DataFrame]) -> Loader:
    def load(name: str, settings: Settings) -> LoadResult:
        if name in tables:
            return LoadResult(name=name, rows=tables[name])
        return LoadResult(name=name, error=f"{name} unavailable")

    return load


def _empty_tables() -> dict[str, pd.DataFrame]:
    tables = {n: pd.DataFrame(columns=list(DATASETS[n].model.model_fields)) for n in ("ember", "coins", "wdi", "missions")}
    tables["superstore"] = pd.DataFrame(columns=list(OrderRow.model_fields))
    return tables


@pytest.fixture
def state(tmp_path: Path) -> AppState:
    return AppState(Settings(data_dir=tmp_path))


# --------------------------------------------------
# Views
# --------------------------------------------------
def test_failed_source_yields_no_data_view(state: AppState) -> None:
    assert state.load(_loader({}))

    view = state.global_energy()
    assert isinstance(view, ChartView)
    assert view.no_data
    assert view.records == []
    assert "ember unavailable" in (view.error or "")


def test_unloaded_state_reports_not_loaded(state: AppState) -> None:
    assert state.error("ember") == "not loaded"
    assert state.global_energy().no_data


def test_global_energy_view_records(state: AppState) -> None:
    state.load(_loader({"ember": _ember(("X", 2020, "Solar", 10.0), ("X", 2020, "Coal", 30.0))}))

    view = state.global_energy()
    assert not view.no_data
    assert view.as_dicts() == [
        {"year": 2020, "total": 40.0, "sum_renew": 10.0, "sum_fossil": 30.0, "clean_share": 0.25}
    ]


def test_continent_selection_filters_view(state: AppState) -> None:
    rows = _ember(("Germany", 2021, "Wind", 3.0), ("China", 2021, "Coal", 9.0), ("China", 2022, "Solar", 1.0))
    state.load(_loader({"ember": rows}))

    assert {r.continent for r in state.continent_shares().records} == {"Europe", "Asia"}

    state.select(continent="Europe", year=2021)
    assert [r.continent for r in state.continent_shares().records] == ["Europe"]
    assert {r.continent for r in state.continent_snapshot().records} == {"Europe", "Asia"}

    state.select(year=2030)
    assert state.continent_snapshot().no_data


def test_every_view_handles_empty_sources(state: AppState) -> None:
    state.load(_loader(_empty_tables()))

    views = state.views()
    assert tuple(views) == VIEW_NAMES
    for name, build in views.items():
        view = build()
        assert view.name == name
        assert view.error is None
        assert view.no_data


def test_every_view_reports_failed_sources(state: AppState) -> None:
    state.load(_loader({}))
    for build in state.views().values():
        assert build().error


def test_mission_filters_flow_into_views(state: AppState) -> None:
    missions = pd.DataFrame(
        [
            {"company": "SpaceX", "location": "", "date": None, "year": 2020, "month": 1,
             "status_rocket": "", "cost": None, "status_mission": "Success"},
            {"company": "CASC", "location": "", "date": None, "year": 2020, "month": 2,
             "status_rocket": "", "cost": None, "status_mission": "Failure"},
        ]
    )
    state.load(_loader({"missions": missions}))
    state.select(missions=MissionFilters(companies=("CASC",)))

    recs = state.company_success().records
    assert [(r.company, r.success_rate) for r in recs] == [("CASC", 0.0)]
    assert [r.launches for r in state.launches_by_status().records] == [1]


# --------------------------------------------------
# Load lifecycle
# --------------------------------------------------
def test_stale_load_results_are_discarded(state: AppState) -> None:
    good = {"ember": LoadResult(name="ember", rows=_ember(("X", 2020, "Solar", 1.0)))}

    first = state.begin_load()
    second = state.begin_load()

    assert state.complete_load(first, good) is False
    assert not state.has_data("ember")
    assert state.complete_load(second, good) is True
    assert state.has_data("ember")


def test_closed_state_ignores_results(state: AppState) -> None:
    token = state.begin_load()
    state.close()
    assert state.complete_load(token, {}) is False
    assert state.load(_loader({"ember": _ember(("X", 2020, "Solar", 1.0))})) is False
    assert state.error("ember") == "not loaded"


def test_reload_failure_does_not_serve_previous_rows(state: AppState) -> None:
    state.load(_loader({"ember": _ember(("X", 2020, "Solar", 1.0))}))
    assert not state.global_energy().no_data

    state.load(_loader({}))
    assert not state.has_data("ember")
    assert state.global_energy().no_data


def test_load_from_directory(tmp_path: Path) -> None:
    (tmp_path / "ember_tidy.csv").write_text(
        "Area,Year,Variable,Value\nX,2020,Solar,10\nX,2020,Coal,30\n", encoding="utf-8"
    )
    state = AppState(Settings(data_dir=tmp_path))

    assert state.load()
    assert state.has_data("ember")
    assert [s for s in SOURCES if state.error(s)] == ["coins", "wdi", "missions", "superstore"]
    assert state.global_energy().records[0].clean_share == 0.25


def test_crypto_growth_follows_continent_and_years(state: AppState) -> None:
    ember = _ember(
        ("Germany", 2020, "Solar", 100.0),
        ("Germany", 2021, "Solar", 110.0),
        ("China", 2020, "Coal", 100.0),
        ("China", 2021, "Coal", 200.0),
    )
    quotes = [(2020, [100.0, 110.0, 99.0], 10.0), (2021, [100.0, 120.0, 90.0], 20.0)]
    coins = pd.DataFrame(
        [
            {"symbol": "BTC", "date": date(year, 1, i + 1), "year": year, "close": close,
             "marketcap": mcap, "volume": None}
            for year, closes, mcap in quotes
            for i, close in enumerate(closes)
        ],
        columns=list(DATASETS["coins"].model.model_fields),
    )
    state.load(_loader({"ember": ember, "coins": coins}))

    (world,) = state.crypto_growth().records
    assert world.mcap_growth == pytest.approx(1.0)
    assert world.energy_growth == pytest.approx(0.55)

    state.select(continent="Europe")
    (europe,) = state.crypto_growth().records
    assert (europe.start_energy, europe.end_energy) == (100.0, 110.0)
    assert europe.energy_growth == pytest.approx(0.1)

    # one selected year leaves no span to grow over
    state.select(growth_years=(2021,))
    assert state.crypto_growth().no_data
