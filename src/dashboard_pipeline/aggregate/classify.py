"""Keyword classification of rows into coarse categories.

Rules are evaluated in order and the first one whose pattern matches any of
the row's text fields decides the category. A row matching no rule gets
``None``: it is left out of category sums but still counts in
category-agnostic aggregates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import pandas as pd

RENEWABLE = "renewable"
FOSSIL = "fossil"
SUCCESS = "success"
FAILURE = "failure"


@dataclass(frozen=True)
class Rule:
    """A category label and the case-insensitive pattern that selects it."""
    category: str
    pattern: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


def make_rules(table: Mapping[str, Iterable[str]]) -> tuple[Rule, ...]:
    """Build ordered rules from ``{category: [keyword or regex, ...]}``.

    Args:
        table: Categories in priority order, each with its keywords.

    Returns:
        Tuple of `Rule`s compiled with `re.IGNORECASE`.
    """
    return tuple(
        Rule(category, re.compile("|".join(f"(?:{k})" for k in keywords), re.IGNORECASE))
        for category, keywords in table.items()
    )


def classify(texts: Iterable[str | None], rules: Sequence[Rule]) -> str | None:
    """Return the first rule's category matching any of `texts`, else None."""
    values = [t for t in texts if t]
    for rule in rules:
        if any(rule.matches(t) for t in values):
            return rule.category
    return None


def classify_frame(
    pdf: pd.DataFrame,
    fields: Sequence[str],
    rules: Sequence[Rule],
    out_col: str = "kind",
) -> pd.DataFrame:
    """Return a copy of `pdf` with a category column computed from `fields`."""
    out = pdf.copy()
    if out.empty:
        out[out_col] = pd.Series(dtype=object)
        return out
    texts = zip(*(out[f].astype(str) for f in fields))
    out[out_col] = pd.Series([classify(t, rules) for t in texts], index=out.index, dtype=object)
    return out


# Canonical keyword tables
ENERGY_RULES = make_rules(
    {
        RENEWABLE: ["clean", "hydro", "wind", "solar", "bio", "renew"],
        FOSSIL: ["fossil", "coal", "gas", "oil"],
    }
)
ENERGY_FIELDS = ("variable", "subcategory")

MISSION_RULES = make_rules(
    {
        SUCCESS: [r"^\s*success\s*$"],
        FAILURE: ["failure"],
    }
)
MISSION_FIELDS = ("status_mission",)
