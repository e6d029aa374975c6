"""Packaged sample catalogs and canonicalization rules."""
