"""Aggregation helpers.

This package turns validated row sets into chart-ready series: keyword
classification, grouped sums and guarded ratios, top-N ranking, cross-series
joins and growth, plus the dataset-specific rollups built from them.
"""
