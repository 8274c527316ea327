"""Cleaning utilities for the pipeline.

Provides scalar coercion (numbers with locale marks, dates, text), per-record
derivations, Pydantic row validation and cross-table enrichment.
"""
