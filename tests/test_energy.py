from __future__ import annotations

import pandas as pd
import pytest

from dashboard_pipeline.aggregate.continents import get_continent
from dashboard_pipeline.aggregate.energy import (
    area_energy_series,
    continent_clean_share,
    energy_vs_gdp,
    global_energy_series,
    top_areas_by_clean_share,
)
from dashboard_pipeline.aggregate.records import to_records
from dashboard_pipeline.models import EnergyShareRecord


def _ember(*rows: tuple) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "area": area,
                "year": year,
                "category": "Electricity generation",
                "subcategory": "Fuel",
                "variable": variable,
                "unit": "TWh",
                "value": value,
            }
            for area, year, variable, value in rows
        ],
        columns=["area", "year", "category", "subcategory", "variable", "unit", "value"],
    )


def test_single_year_split() -> None:
    out = global_energy_series(_ember(("X", 2020, "Solar", 10.0), ("X", 2020, "Coal", 30.0)))

    assert out.to_dict(orient="records") == [
        {"year": 2020, "total": 40.0, "sum_renew": 10.0, "sum_fossil": 30.0, "clean_share": 0.25}
    ]


def test_unclassified_rows_are_excluded_from_both_sums() -> None:
    out = global_energy_series(
        _ember(("X", 2020, "Solar", 10.0), ("X", 2020, "Nuclear", 99.0), ("X", 2020, "Gas", 10.0))
    )
    assert out.loc[0, "total"] == 20.0
    assert out.loc[0, "clean_share"] == 0.5


def test_global_series_is_ascending_and_sums_match() -> None:
    rows = _ember(
        ("X", 2022, "Wind", 5.0),
        ("Y", 2020, "Hydro", 7.0),
        ("X", 2021, "Oil", 3.0),
        ("Y", 2022, "Coal", 1.0),
        ("Y", 2021, "Bioenergy", 2.0),
    )
    out = global_energy_series(rows)

    assert out["year"].tolist() == [2020, 2021, 2022]
    assert out["sum_renew"].sum() == pytest.approx(14.0)
    assert out["sum_fossil"].sum() == pytest.approx(4.0)
    assert out["clean_share"].between(0, 1).all()


def test_years_without_classified_generation_are_omitted() -> None:
    out = global_energy_series(_ember(("X", 2019, "Demand", 50.0), ("X", 2020, "Solar", 1.0)))
    assert out["year"].tolist() == [2020]


def test_empty_rows_give_no_records() -> None:
    out = global_energy_series(_ember())
    assert out.empty
    assert to_records(out, EnergyShareRecord) == []


def test_area_series_keeps_zero_total_groups() -> None:
    out = area_energy_series(_ember(("X", 2020, "Nuclear", 5.0), ("Y", 2020, "Solar", 5.0)))
    assert out["area"].tolist() == ["X", "Y"]
    assert out["clean_share"].tolist() == [0.0, 1.0]


def test_continent_share_maps_and_filters() -> None:
    rows = _ember(
        ("Germany", 2021, "Wind", 30.0),
        ("France", 2021, "Gas", 10.0),
        ("Germany", 1999, "Coal", 100.0),
        ("Atlantis", 2021, "Solar", 1000.0),
        ("Japan", 2021, "Coal", 4.0),
    )
    out = continent_clean_share(rows, year_min=2000)

    assert get_continent("Germany") == "Europe"
    assert get_continent("Atlantis") is None
    assert out[["continent", "year"]].values.tolist() == [["Europe", 2021], ["Asia", 2021]]
    europe = out.iloc[0]
    assert (europe["total"], europe["clean_share"]) == (40.0, 0.75)


def test_top_areas_ranks_large_areas_at_latest_year() -> None:
    rows = _ember(
        ("Big", 2022, "Solar", 60.0),
        ("Big", 2022, "Coal", 40.0),
        ("Huge", 2022, "Wind", 90.0),
        ("Huge", 2022, "Gas", 110.0),
        ("Tiny", 2022, "Hydro", 1.0),
        ("Old", 2020, "Solar", 500.0),
    )
    out = top_areas_by_clean_share(rows, top_n_areas=2, volume_quantile=0.0)

    # tied at 1.0; Old comes first in the year-ordered series
    assert out["area"].tolist() == ["Old", "Tiny"]
    assert out["year"].tolist() == [2020, 2022]

    big_only = top_areas_by_clean_share(rows, top_n_areas=5, volume_quantile=0.5)
    assert set(big_only["area"]) == {"Huge", "Old"}
    assert big_only["clean_share"].is_monotonic_decreasing


def test_energy_vs_gdp_joins_shared_years() -> None:
    def wdi(series: str, year: int, value: float, country: str = "China") -> dict:
        return {
            "country_name": country,
            "country_code": "CHN",
            "series_name": series,
            "series_code": "",
            "year": year,
            "value": value,
        }

    energy = "Energy use (kg of oil equivalent per capita)"
    gdp = "GDP per capita (current US$)"
    rows = pd.DataFrame(
        [
            wdi(energy, 2010, 1800.0),
            wdi(energy, 2011, 1900.0),
            wdi(energy, 2012, 2000.0),
            wdi(gdp, 2013, 7000.0),
            wdi(gdp, 2012, 6300.0),
            wdi(gdp, 2011, 5600.0),
            wdi(gdp, 2011, 1.0, country="India"),
        ]
    )
    out = energy_vs_gdp(rows, "China")

    assert out.to_dict(orient="records") == [
        {"year": 2011, "energy_per_capita_kg": 1900.0, "gdp_per_capita": 5600.0},
        {"year": 2012, "energy_per_capita_kg": 2000.0, "gdp_per_capita": 6300.0},
    ]
