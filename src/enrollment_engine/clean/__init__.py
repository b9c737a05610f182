"""Cleaning utilities for the row set.

Provides functions to map source headers onto canonical column names, coerce
comma-grouped numeric strings to floats, and record fields that fail coercion.
"""
