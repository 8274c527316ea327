from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from dashboard_pipeline.models import CoinRow, EnergyRow, EnergyShareRecord, MissionRow


def test_energy_row_validates() -> None:
    row = EnergyRow.model_validate(
        {"area": "Spain", "year": 2022, "variable": "Solar", "value": 40.5}
    )
    assert row.category == ""
    assert row.value == 40.5


@pytest.mark.parametrize(
    "changes",
    [
        {"year": 0},
        {"area": ""},
        {"value": float("nan")},
        {"value": float("inf")},
        {"value": 0.0},
    ],
)
def test_energy_row_rejects_invalid(changes: dict) -> None:
    rec = {"area": "Spain", "year": 2022, "variable": "Solar", "value": 1.0, **changes}
    with pytest.raises(ValidationError):
        EnergyRow.model_validate(rec)


def test_rows_are_immutable() -> None:
    row = CoinRow(symbol="BTC", date=date(2021, 1, 1), year=2021, close=30000.0)
    with pytest.raises(ValidationError):
        row.close = 1.0  # type: ignore[misc]


def test_mission_row_allows_unknown_date_and_cost() -> None:
    row = MissionRow(company="SpaceX", status_mission="Success")
    assert row.date is None
    assert row.cost is None


def test_aggregate_record_rejects_nan_share() -> None:
    with pytest.raises(ValidationError):
        EnergyShareRecord(year=2020, total=0.0, sum_renew=0.0, sum_fossil=0.0, clean_share=float("nan"))
