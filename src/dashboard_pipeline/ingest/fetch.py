"""Utilities to read a dataset's source text from disk or over HTTP.

`SourceRef` identifies a source file; `read_source_text` resolves it against
the configured data directory or base URL and returns decoded text. Any
failure to obtain readable text is reported as `SourceUnavailableError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dashboard_pipeline.config import Settings

log = logging.getLogger(__name__)


class SourceUnavailableError(RuntimeError):
    """The source could not be fetched or decoded."""


@dataclass(frozen=True)
class SourceRef:
    """A dataset source file.

    Attributes:
        dataset: Dataset name (for logging).
        file_name: File name relative to the data directory or base URL.
    """
    dataset: str
    file_name: str

    def location(self, settings: Settings) -> str:
        """Return the URL or filesystem path this source resolves to."""
        if settings.base_url:
            return f"{settings.base_url}/{self.file_name}"
        return str(settings.data_dir / self.file_name)


def _read_local(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SourceUnavailableError(f"cannot read {path}: {e}") from e
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceUnavailableError(f"{path} is not valid UTF-8: {e}") from e


def _read_http(url: str, settings: Settings) -> str:
    import requests  # type: ignore[import-untyped]

    try:
        r = requests.get(url, headers={"User-Agent": settings.user_agent}, timeout=settings.http_timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailableError(f"fetch failed for {url}: {e}") from e

    try:
        return r.content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceUnavailableError(f"{url} is not valid UTF-8: {e}") from e


def read_source_text(source: SourceRef, settings: Settings) -> str:
    """Read the full text of a source file.

    Args:
        source: The `SourceRef` to read.
        settings: Pipeline settings (data directory, base URL, HTTP options).

    Returns:
        Decoded text with any UTF-8 BOM removed.

    Raises:
        SourceUnavailableError: if the file is missing, the request fails
            (including non-2xx status) or the bytes are not UTF-8.
    """
    loc = source.location(settings)
    log.info("Reading %s source: %s", source.dataset, loc)
    if settings.base_url:
        text = _read_http(loc, settings)
    else:
        text = _read_local(Path(loc))
    log.info("Read %s: %d characters", source.dataset, len(text))
    return text
