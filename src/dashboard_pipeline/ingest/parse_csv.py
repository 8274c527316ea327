"""Parsing helpers for delimited source text.

Sources are comma- or semicolon-separated with a header row. Cells are kept
as strings here; typing happens when the table schema is applied.
"""

from __future__ import annotations

import io
import logging

import pandas as pd

from dashboard_pipeline.ingest.fetch import SourceUnavailableError

log = logging.getLogger(__name__)


def detect_delimiter(text: str) -> str:
    """Return ``";"`` when the header line has more semicolons than commas, else ``","``."""
    header = text.lstrip("\ufeff").split("\n", 1)[0]
    return ";" if header.count(";") > header.count(",") else ","


def parse_delimited_text(text: str, delimiter: str | None = None) -> pd.DataFrame:
    """Parse delimited text into a string-typed pandas DataFrame.

    Args:
        text: Full source text including the header row.
        delimiter: ``","`` or ``";"``; detected from the header when None.

    Returns:
        pandas.DataFrame with one column per header (names trimmed) and one
        row per non-blank line. Empty cells are ``""``.

    Raises:
        SourceUnavailableError: if the text has no header row or cannot be
            tokenized at all.
    """
    text = text.lstrip("\ufeff")
    sep = delimiter or detect_delimiter(text)

    try:
        pdf = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError as e:
        raise SourceUnavailableError("source has no header row") from e
    except pd.errors.ParserError as e:
        raise SourceUnavailableError(f"source is not valid delimited text: {e}") from e

    pdf.columns = [str(c).strip() for c in pdf.columns]
    log.debug("Parsed %d rows x %d columns (sep=%r)", len(pdf), len(pdf.columns), sep)
    return pdf.fillna("")
