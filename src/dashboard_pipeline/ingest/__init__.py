"""Ingestion utilities: source fetching, delimited-text parsing, header schemas
and the per-dataset load boundary.
"""
