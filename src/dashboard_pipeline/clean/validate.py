"""Validation utilities for the Clean layer.

`apply_schema` coerces a string-typed source frame through a `TableSchema`,
optionally derives per-record fields, and validates each surviving record
against a Pydantic row model. Rows failing any step are excluded whole; only
the count is reported.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

import pandas as pd
from pydantic import BaseModel, ValidationError

from dashboard_pipeline.clean.coerce import to_date, to_integer, to_number, to_text
from dashboard_pipeline.ingest.schema import ColumnSpec, TableSchema

log = logging.getLogger(__name__)

Derive = Callable[[dict[str, Any]], dict[str, Any]]


def coerce_cell(col: ColumnSpec, value: Any, decimal_mark: str = ".", thousands_sep: str = ",") -> Any:
    """Coerce one cell according to its column kind; None means it failed."""
    if col.kind == "number":
        return to_number(value, decimal_mark=decimal_mark, thousands_sep=thousands_sep)
    if col.kind == "integer":
        return to_integer(value, decimal_mark=decimal_mark, thousands_sep=thousands_sep)
    if col.kind == "date":
        return to_date(value, col.formats)

    text = to_text(value)
    if col.kind == "upper":
        text = text.upper()
    return text or None


def validate_records(
    records: list[dict[str, Any]],
    model: type[BaseModel],
) -> tuple[list[dict[str, Any]], int]:
    """Validate records using Pydantic.

    Args:
        records: Coerced records keyed by logical field name.
        model: Row model used via `model_validate`.

    Returns:
        A tuple of (list_of_validated_records, bad_count).
    """
    good: list[dict[str, Any]] = []
    bad = 0

    for rec in records:
        try:
            m = model.model_validate(rec)
            good.append(m.model_dump(mode="python"))
        except ValidationError:
            bad += 1

    return good, bad


def apply_schema(
    pdf: pd.DataFrame,
    schema: TableSchema,
    model: type[BaseModel],
    *,
    derive: Derive | None = None,
    decimal_mark: str = ".",
    thousands_sep: str = ",",
) -> tuple[pd.DataFrame, int]:
    """Turn a raw string frame into a validated row set.

    Steps per record: resolve header aliases, coerce each column, drop the
    record if a required column failed, fill optional failures with the
    column default, run `derive`, then validate against `model`.

    Args:
        pdf: Parsed source frame (all cells strings).
        schema: Table schema describing columns and aliases.
        model: Pydantic row model the output must satisfy.
        derive: Optional hook adding derived fields to a coerced record.
        decimal_mark: Decimal mark for numeric columns.
        thousands_sep: Thousands separator for numeric columns.

    Returns:
        A tuple of (validated DataFrame with the model's columns, dropped_count).
    """
    fields = list(model.model_fields)
    mapping = schema.resolve(pdf.columns)

    coerced: list[dict[str, Any]] = []
    dropped = 0

    for raw in pdf.to_dict(orient="records"):
        rec: dict[str, Any] = {}
        ok = True
        for col in schema.columns:
            header = mapping.get(col.name)
            value = None
            if header is not None:
                value = coerce_cell(col, raw.get(header), decimal_mark, thousands_sep)
            if value is None:
                if col.required:
                    ok = False
                    break
                value = col.default
            rec[col.name] = value

        if not ok:
            dropped += 1
            continue
        if derive is not None:
            rec = derive(rec)
        coerced.append(rec)

    good, bad = validate_records(coerced, model)
    dropped += bad

    if dropped:
        log.info("%s: dropped %d of %d rows during validation", schema.name, dropped, len(pdf))
    return pd.DataFrame(good, columns=fields), dropped
