"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the pipeline's environment variables (optionally from a project-root
`.env`) and fails fast on values that cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DELIMITERS = (",", ";")


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        data_dir: Directory holding the local CSV sources.
        base_url: When set, sources are fetched from `<base_url>/<file>` over HTTP.
        user_agent: User-Agent header sent with HTTP fetches.
        http_timeout: Request timeout in seconds.
        delimiter: Forced field delimiter, or None to detect it per source.
        decimal_mark: Decimal mark used when coercing numbers.
        thousands_sep: Thousands separator stripped when coercing numbers.
        year_min: Lower year bound for per-area and per-continent series.
        top_n: Default size of ranked selections.
        volume_quantile: Latest-total quantile an area must reach to be ranked.
    """
    data_dir: Path
    base_url: str | None = None
    user_agent: str = "dashboard-pipeline/0.1"
    http_timeout: float = 30.0
    delimiter: str | None = None
    decimal_mark: str = "."
    thousands_sep: str = ","
    year_min: int = 2000
    top_n: int = 5
    volume_quantile: float = 0.85


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from e


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a numeric variable does not parse, the delimiter is
            not `,` or `;`, the decimal mark equals the thousands separator,
            or the volume quantile falls outside [0, 1].
    """
    data_dir = Path(os.getenv("DASHBOARD_DATA_DIR", "data"))
    base_url = os.getenv("DASHBOARD_BASE_URL", "").strip().rstrip("/") or None
    user_agent = os.getenv("DASHBOARD_USER_AGENT", "").strip() or "dashboard-pipeline/0.1"
    delimiter = os.getenv("DASHBOARD_CSV_DELIMITER", "").strip() or None
    decimal_mark = os.getenv("DASHBOARD_DECIMAL_MARK", ".").strip() or "."
    thousands_sep = os.getenv("DASHBOARD_THOUSANDS_SEP", ",")

    if delimiter is not None and delimiter not in DELIMITERS:
        raise RuntimeError(
            f"DASHBOARD_CSV_DELIMITER must be one of {DELIMITERS}, got {delimiter!r}."
        )
    if decimal_mark == thousands_sep:
        raise RuntimeError(
            "DASHBOARD_DECIMAL_MARK and DASHBOARD_THOUSANDS_SEP must differ "
            "(example: '.' and ',' or ',' and '.')."
        )

    volume_quantile = _env_float("DASHBOARD_VOLUME_QUANTILE", 0.85)
    if not 0.0 <= volume_quantile <= 1.0:
        raise RuntimeError("DASHBOARD_VOLUME_QUANTILE must be between 0 and 1.")

    return Settings(
        data_dir=data_dir,
        base_url=base_url,
        user_agent=user_agent,
        http_timeout=_env_float("DASHBOARD_HTTP_TIMEOUT", 30.0),
        delimiter=delimiter,
        decimal_mark=decimal_mark,
        thousands_sep=thousands_sep,
        year_min=_env_int("DASHBOARD_YEAR_MIN", 2000),
        top_n=_env_int("DASHBOARD_TOP_N", 5),
        volume_quantile=volume_quantile,
    )
