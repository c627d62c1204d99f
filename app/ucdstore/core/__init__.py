"""Reconciliation engine: analyze, mirror, clean and repair."""
