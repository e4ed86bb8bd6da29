"""Catalogs of the cipher and digest primitives backing the default engine."""
