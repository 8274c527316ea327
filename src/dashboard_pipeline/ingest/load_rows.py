"""Row-set loading utilities.

This module ties together fetching, parsing and schema validation for each
known dataset. `load_dataset` is the pipeline's load boundary: it never raises
for an unreadable source, it returns a `LoadResult` with zero rows and an
error message instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import pandas as pd
from pydantic import BaseModel

from dashboard_pipeline.clean.transform import (
    derive_coin_fields,
    derive_mission_fields,
    enrich_orders,
    sort_by_date,
)
from dashboard_pipeline.clean.validate import Derive, apply_schema
from dashboard_pipeline.config import Settings
from dashboard_pipeline.ingest.fetch import SourceRef, SourceUnavailableError, read_source_text
from dashboard_pipeline.ingest.parse_csv import parse_delimited_text
from dashboard_pipeline.ingest.schema import (
    COINS_SCHEMA,
    EMBER_SCHEMA,
    MISSIONS_SCHEMA,
    ORDERS_SCHEMA,
    RETURNS_SCHEMA,
    USERS_SCHEMA,
    WDI_SCHEMA,
    TableSchema,
)
from dashboard_pipeline.models import (
    CoinRow,
    EnergyRow,
    MissionRow,
    OrderRow,
    ReturnRow,
    UserRow,
    WdiRow,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSpec:
    """Everything needed to turn one source file into a row set."""
    name: str
    file_name: str
    schema: TableSchema
    model: type[BaseModel]
    derive: Derive | None = None
    finalize: Callable[[pd.DataFrame], pd.DataFrame] | None = None


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading one dataset.

    Attributes:
        name: Dataset name.
        rows: Validated row set (empty on failure).
        dropped: Number of source rows excluded during validation.
        error: Message describing why the source was unavailable, or None.
    """
    name: str
    rows: pd.DataFrame = field(default_factory=pd.DataFrame)
    dropped: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


DATASETS: dict[str, DatasetSpec] = {
    spec.name: spec
    for spec in (
        DatasetSpec("ember", "ember_tidy.csv", EMBER_SCHEMA, EnergyRow),
        DatasetSpec(
            "coins",
            "crypto_clean.csv",
            COINS_SCHEMA,
            CoinRow,
            derive=derive_coin_fields,
            finalize=sort_by_date,
        ),
        DatasetSpec("wdi", "worldbank_tidy.csv", WDI_SCHEMA, WdiRow),
        DatasetSpec("missions", "Space_Corrected.csv", MISSIONS_SCHEMA, MissionRow, derive=derive_mission_fields),
        DatasetSpec("orders", "orders.csv", ORDERS_SCHEMA, OrderRow),
        DatasetSpec("returns", "returns.csv", RETURNS_SCHEMA, ReturnRow),
        DatasetSpec("users", "users.csv", USERS_SCHEMA, UserRow),
    )
}


def _empty_rows(spec: DatasetSpec) -> pd.DataFrame:
    return pd.DataFrame(columns=list(spec.model.model_fields))


def load_dataset(name: str, settings: Settings) -> LoadResult:
    """Fetch, parse and validate one dataset.

    Args:
        name: Key into `DATASETS`.
        settings: Pipeline settings.

    Returns:
        `LoadResult` with the validated rows, or with an empty frame and
        `error` set when the source was unavailable.

    Raises:
        KeyError: if `name` is not a known dataset.
    """
    spec = DATASETS[name]
    source = SourceRef(dataset=spec.name, file_name=spec.file_name)

    try:
        text = read_source_text(source, settings)
        pdf = parse_delimited_text(text, settings.delimiter)
    except SourceUnavailableError as e:
        log.warning("Dataset %s unavailable: %s", name, e)
        return LoadResult(name=name, rows=_empty_rows(spec), error=str(e))

    rows, dropped = apply_schema(
        pdf,
        spec.schema,
        spec.model,
        derive=spec.derive,
        decimal_mark=settings.decimal_mark,
        thousands_sep=settings.thousands_sep,
    )
    if spec.finalize is not None and not rows.empty:
        rows = spec.finalize(rows)

    log.info("Loaded %s: %d rows (%d dropped)", name, len(rows), dropped)
    return LoadResult(name=name, rows=rows, dropped=dropped)


def load_superstore(settings: Settings) -> LoadResult:
    """Load orders, returns and users and return enriched order rows.

    The three tables are one logical dataset: if any of them is unavailable
    the whole result carries the error and no rows.
    """
    parts = {n: load_dataset(n, settings) for n in ("orders", "returns", "users")}
    failed = [p for p in parts.values() if not p.ok]
    if failed:
        msg = "; ".join(f"{p.name}: {p.error}" for p in failed)
        return LoadResult(name="superstore", rows=_empty_rows(DATASETS["orders"]), error=msg)

    rows = enrich_orders(parts["orders"].rows, parts["returns"].rows, parts["users"].rows)
    dropped = sum(p.dropped for p in parts.values())
    return LoadResult(name="superstore", rows=rows, dropped=dropped)
