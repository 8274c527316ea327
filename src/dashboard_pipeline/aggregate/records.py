"""Conversion of aggregate frames into validated record models.

This is the last step before data leaves the pipeline: each row is validated
against its record model, so a NaN or Infinity that slipped through a
reduction fails loudly here instead of reaching a chart.
"""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

import pandas as pd
from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def to_records(data: pd.DataFrame | Iterable[dict[str, Any]], model: type[M]) -> list[M]:
    """Validate aggregate rows into `model` instances.

    Args:
        data: Aggregate DataFrame (extra columns are ignored) or dicts.
        model: Record model to validate against.

    Returns:
        List of model instances in input order.

    Raises:
        pydantic.ValidationError: if a row violates the record model.
    """
    fields = list(model.model_fields)
    if isinstance(data, pd.DataFrame):
        if data.empty:
            return []
        rows = data[[c for c in fields if c in data.columns]].to_dict(orient="records")
    else:
        rows = [{k: v for k, v in d.items() if k in fields} for d in data]
    return [model.model_validate(r) for r in rows]
