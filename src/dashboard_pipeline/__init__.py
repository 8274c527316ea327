"""dashboard_pipeline package.

Turns the delimited text sources behind the energy, crypto, space-mission and
Superstore dashboards into validated row sets and chart-ready aggregate
series.

Architecture:
- Ingest → Clean → Aggregate layers, all in memory
- pandas holds every row set and intermediate rollup
- Pydantic models validate rows at ingestion and records on the way out
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
