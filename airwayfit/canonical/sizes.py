"""
Size and diameter parsing.

SAD sizes arrive as descriptors like "Size 4, Medium adult, 50-90 kg" or as
plain numbers. Diameters arrive as numbers, numeric text, or text with a
length unit. Both parsers return None instead of raising, so one bad row
never stops a catalog from loading.
"""

import math
import re
from typing import Any, Optional

import pint

from airwayfit.canonical.units import Q_, is_length, magnitude_in


# "Size 4", "size: 2.5", "SIZE#3"
SIZE_TOKEN_PATTERN = re.compile(
    r'\bsize\s*[:#]?\s*(\d+(?:\.\d+)?)',
    re.IGNORECASE
)

# A single number followed by a unit word: "9.6 mm", "0.38in", "12 µm"
QUANTITY_PATTERN = re.compile(
    r'^\d+(?:\.\d+)?\s*[a-zA-Zµ]+$'
)


def _finite_float(value: Any) -> Optional[float]:
    """Float for finite ints/floats and numeric text, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def parse_size(value: Any) -> Optional[float]:
    """
    Extract the nominal size from a SAD size descriptor.

    Args:
        value: Number, numeric text, or descriptor text with a "size" token

    Returns:
        The size as a float, or None if unparseable
    """
    number = _finite_float(value)
    if number is not None:
        return number

    if not isinstance(value, str):
        return None

    match = SIZE_TOKEN_PATTERN.search(value)
    if not match:
        return None
    return float(match.group(1))


def _quantity_to_mm(text: str) -> Optional[float]:
    if not QUANTITY_PATTERN.match(text):
        return None
    try:
        quantity = Q_(text)
        if not is_length(quantity):
            return None
        return float(magnitude_in(quantity, "mm"))
    except (pint.errors.PintError, ValueError, TypeError, AttributeError):
        return None


def parse_diameter(value: Any) -> Optional[float]:
    """
    Parse a catalog diameter into millimetres.

    Bare numbers are taken as millimetres. Text with a length unit is
    converted through pint. Non-finite, zero and negative values are rejected.

    Returns:
        Diameter in mm, or None if the value is unusable
    """
    number = _finite_float(value)
    if number is None and isinstance(value, str):
        number = _quantity_to_mm(value.strip())

    if number is None or not math.isfinite(number) or number <= 0:
        return None
    return number
