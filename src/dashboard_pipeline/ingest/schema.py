"""Declarative header schemas for every source table.

A `TableSchema` lists the logical columns a dataset needs, the header aliases
each one may appear under (matched case-insensitively, so localized and
English exports both resolve), and how each cell is coerced. Aliases are
resolved once per load instead of being probed row by row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

log = logging.getLogger(__name__)

KINDS = ("text", "upper", "number", "integer", "date")


@dataclass(frozen=True)
class ColumnSpec:
    """One logical column of a table.

    Attributes:
        name: Logical field name used in the validated row set.
        aliases: Accepted header names, tried in order.
        kind: Coercion rule: text, upper, number, integer or date.
        required: When True a failed coercion drops the whole row.
        default: Value used for an optional column that fails coercion.
        formats: Extra `strptime` formats for date columns.
    """
    name: str
    aliases: tuple[str, ...]
    kind: str = "text"
    required: bool = True
    default: Any = None
    formats: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"unknown column kind {self.kind!r} for {self.name}")


@dataclass(frozen=True)
class TableSchema:
    """Ordered collection of `ColumnSpec`s for one source table."""
    name: str
    columns: tuple[ColumnSpec, ...]

    def resolve(self, headers: Iterable[str]) -> dict[str, str]:
        """Map logical column names to the actual headers present.

        Args:
            headers: Header names from the parsed source.

        Returns:
            Dict of logical name → source header for every column found.
            Columns with no matching alias are absent from the result.
        """
        lookup: dict[str, str] = {}
        for h in headers:
            key = str(h).strip().lower()
            lookup.setdefault(key, h)

        mapping: dict[str, str] = {}
        for col in self.columns:
            for alias in (col.name, *col.aliases):
                hit = lookup.get(alias.strip().lower())
                if hit is not None:
                    mapping[col.name] = hit
                    break

        missing = [c.name for c in self.columns if c.required and c.name not in mapping]
        if missing:
            log.warning("%s: required columns not found in header: %s", self.name, ", ".join(missing))
        return mapping


def _text(name: str, *aliases: str, required: bool = True) -> ColumnSpec:
    return ColumnSpec(name, aliases, "text", required=required, default="")


# =========================================================
# SOURCE TABLES
# =========================================================

EMBER_SCHEMA = TableSchema(
    "ember",
    (
        _text("area", "Area", "Country", "Entity"),
        ColumnSpec("year", ("Year", "Año"), "integer"),
        _text("category", "Category", "Categoría", required=False),
        _text("subcategory", "Subcategory", "Sub-category", required=False),
        _text("variable", "Variable"),
        _text("unit", "Unit", "Unidad", required=False),
        ColumnSpec("value", ("Value", "Valor"), "number"),
    ),
)

COINS_SCHEMA = TableSchema(
    "coins",
    (
        ColumnSpec("symbol", ("Symbol", "Ticker"), "upper"),
        ColumnSpec("date", ("Date", "Fecha"), "date", formats=("%m/%d/%Y", "%Y-%m-%d %H:%M:%S")),
        ColumnSpec("close", ("Close", "Cierre"), "number"),
        ColumnSpec("marketcap", ("Marketcap", "MarketCap", "Market Cap", "market_cap"), "number", required=False),
        ColumnSpec("volume", ("Volume", "Volumen"), "number", required=False),
    ),
)

WDI_SCHEMA = TableSchema(
    "wdi",
    (
        _text("country_name", "Country Name", "Country"),
        _text("country_code", "Country Code", required=False),
        _text("series_name", "Series Name", "Indicator Name"),
        _text("series_code", "Series Code", "Indicator Code", required=False),
        ColumnSpec("year", ("Year", "Time"), "integer"),
        ColumnSpec("value", ("Value",), "number"),
    ),
)

MISSIONS_SCHEMA = TableSchema(
    "missions",
    (
        _text("company", "Company Name", "Company"),
        _text("location", "Location", required=False),
        ColumnSpec(
            "date",
            ("Datum", "Date"),
            "date",
            required=False,
            formats=("%a %b %d, %Y %H:%M UTC", "%a %b %d, %Y"),
        ),
        _text("status_rocket", "Status Rocket", required=False),
        ColumnSpec("cost", ("Rocket", "Cost"), "number", required=False),
        _text("status_mission", "Status Mission", "Mission Status"),
    ),
)

_US_DATES = ("%m/%d/%Y", "%m/%d/%y")

ORDERS_SCHEMA = TableSchema(
    "orders",
    (
        _text("order_id", "Order ID", "OrderID"),
        ColumnSpec("order_date", ("Order Date",), "date", formats=_US_DATES),
        ColumnSpec("ship_date", ("Ship Date",), "date", required=False, formats=_US_DATES),
        ColumnSpec("sales", ("Sales",), "number"),
        ColumnSpec("profit", ("Profit",), "number"),
        ColumnSpec("discount", ("Discount",), "number", required=False, default=0.0),
        ColumnSpec("quantity", ("Order Quantity", "Quantity"), "number", required=False, default=0.0),
        _text("region", "Region", required=False),
        _text("category", "Product Category", "Category", required=False),
        _text("sub_category", "Product Sub-Category", "Sub-Category", "subcategory", required=False),
        _text("ship_mode", "Ship Mode", required=False),
        _text("priority", "Order Priority", required=False),
    ),
)

RETURNS_SCHEMA = TableSchema("returns", (_text("order_id", "Order ID", "OrderID"),))

USERS_SCHEMA = TableSchema(
    "users",
    (
        _text("region", "Region"),
        _text("manager", "Manager", required=False),
    ),
)
