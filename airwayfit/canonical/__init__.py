"""
Canonicalization of noisy catalog text.

Turns free-text device names and manufacturers into stable matching keys
and display strings, and parses embedded size tokens and diameters.
"""

from airwayfit.canonical.rules import CanonicalRules, DEFAULT_RULES, load_canonical_rules
from airwayfit.canonical.normalizer import (
    canonical_name,
    display_name,
    canonical_manufacturer,
    display_manufacturer,
    canonical_key,
)
from airwayfit.canonical.sizes import parse_size, parse_diameter

__all__ = [
    "CanonicalRules",
    "DEFAULT_RULES",
    "load_canonical_rules",
    "canonical_name",
    "display_name",
    "canonical_manufacturer",
    "display_manufacturer",
    "canonical_key",
    "parse_size",
    "parse_diameter",
]
