"""Pydantic models used for row validation and aggregate outputs.

Row models define the schema a record must satisfy to enter a row set; they
are frozen so a validated row cannot change after ingestion. Aggregate models
describe the chart-ready records handed to the presentation layer. Every model
rejects NaN and Infinity, so a degenerate ratio can never leak downstream.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

ROW_CONFIG = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)
RECORD_CONFIG = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)


# =========================================================
# ROWS
# =========================================================

class EnergyRow(BaseModel):
    """One Ember long-format observation (area, year, variable, value)."""
    model_config = ROW_CONFIG
    area: str = Field(..., min_length=1)
    year: int = Field(..., gt=0)
    category: str = ""
    subcategory: str = ""
    variable: str = Field(..., min_length=1)
    unit: str = ""
    value: float = Field(..., gt=0)


class CoinRow(BaseModel):
    """One daily cryptocurrency quote.

    Attributes:
        symbol: Upper-cased ticker.
        date: Quote date.
        year: Calendar year derived from `date`.
        close: Closing price (strictly positive).
        marketcap: Market capitalisation, when reported.
        volume: Traded volume, when reported.
    """
    model_config = ROW_CONFIG
    symbol: str = Field(..., min_length=1)
    date: dt.date
    year: int = Field(..., gt=0)
    close: float = Field(..., gt=0)
    marketcap: float | None = None
    volume: float | None = None


class WdiRow(BaseModel):
    """One World Bank development-indicator observation."""
    model_config = ROW_CONFIG
    country_name: str = Field(..., min_length=1)
    country_code: str = ""
    series_name: str = Field(..., min_length=1)
    series_code: str = ""
    year: int = Field(..., gt=0)
    value: float = Field(..., gt=0)


class MissionRow(BaseModel):
    """One launch record; the date and cost are often missing in the source."""
    model_config = ROW_CONFIG
    company: str = Field(..., min_length=1)
    location: str = ""
    date: dt.date | None = None
    year: int | None = None
    month: int | None = Field(default=None, ge=1, le=12)
    status_rocket: str = ""
    cost: float | None = None
    status_mission: str = Field(..., min_length=1)


class OrderRow(BaseModel):
    """One Superstore order line."""
    model_config = ROW_CONFIG
    order_id: str = Field(..., min_length=1)
    order_date: dt.date
    ship_date: dt.date | None = None
    sales: float
    profit: float
    discount: float = 0.0
    quantity: float = 0.0
    region: str = ""
    category: str = ""
    sub_category: str = ""
    ship_mode: str = ""
    priority: str = ""


class ReturnRow(BaseModel):
    """An order id listed in the returns table."""
    model_config = ROW_CONFIG
    order_id: str = Field(..., min_length=1)


class UserRow(BaseModel):
    """A region → manager assignment."""
    model_config = ROW_CONFIG
    region: str = Field(..., min_length=1)
    manager: str = ""


# =========================================================
# AGGREGATE RECORDS
# =========================================================

class EnergyShareRecord(BaseModel):
    """Renewable vs fossil generation for one year."""
    model_config = RECORD_CONFIG
    year: int
    total: float = Field(..., ge=0)
    sum_renew: float = Field(..., ge=0)
    sum_fossil: float = Field(..., ge=0)
    clean_share: float = Field(..., ge=0, le=1)


class ContinentShareRecord(BaseModel):
    """Renewable vs fossil generation for one continent-year."""
    model_config = RECORD_CONFIG
    continent: str
    year: int
    total: float = Field(..., ge=0)
    sum_renew: float = Field(..., ge=0)
    sum_fossil: float = Field(..., ge=0)
    clean_share: float = Field(..., ge=0, le=1)


class AreaRankingRecord(BaseModel):
    """An area's clean share at the ranking time point."""
    model_config = RECORD_CONFIG
    area: str
    year: int
    total: float = Field(..., ge=0)
    clean_share: float = Field(..., ge=0, le=1)


class CryptoShareRecord(BaseModel):
    """Annualised volatility of a coin next to that year's global clean share."""
    model_config = RECORD_CONFIG
    year: int
    symbol: str
    clean_share: float = Field(..., ge=0, le=1)
    vol_ann: float = Field(..., gt=0)
    mcap: float


class GrowthRecord(BaseModel):
    """Market-cap growth vs generation growth over a coin's observed span."""
    model_config = RECORD_CONFIG
    symbol: str
    start_year: int
    end_year: int
    start_mcap: float
    end_mcap: float
    mcap_growth: float
    start_energy: float
    end_energy: float
    energy_growth: float


class EnergyGdpRecord(BaseModel):
    """Energy use per capita joined to GDP per capita for one year."""
    model_config = RECORD_CONFIG
    year: int
    energy_per_capita_kg: float = Field(..., gt=0)
    gdp_per_capita: float = Field(..., gt=0)


class MonthlySalesRecord(BaseModel):
    """Sales and profit for one calendar month (YYYY-MM)."""
    model_config = RECORD_CONFIG
    month: str
    sales: float
    profit: float
    by_category: dict[str, float]


class RegionRecord(BaseModel):
    """Sales, profit and margin for one region."""
    model_config = RECORD_CONFIG
    region: str
    sales: float
    profit: float
    margin: float


class RetailTotalsRecord(BaseModel):
    """Dashboard-wide retail KPIs."""
    model_config = RECORD_CONFIG
    sales: float
    profit: float
    margin: float
    return_rate: float = Field(..., ge=0, le=1)


class LaunchCountRecord(BaseModel):
    """Launches for one (year, mission status) pair."""
    model_config = RECORD_CONFIG
    year: int
    status: str
    launches: int = Field(..., ge=0)


class LaunchMonthRecord(BaseModel):
    """Launch count and mean known cost for one (year, month) cell."""
    model_config = RECORD_CONFIG
    year: int
    month: int = Field(..., ge=1, le=12)
    launches: int = Field(..., ge=0)
    mean_cost: float


class CompanySuccessRecord(BaseModel):
    """Mission outcome counts and success rate for one company."""
    model_config = RECORD_CONFIG
    company: str
    successes: int = Field(..., ge=0)
    failures: int = Field(..., ge=0)
    success_rate: float = Field(..., ge=0, le=1)
