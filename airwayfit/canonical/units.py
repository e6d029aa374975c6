"""
Unit registry for diameter parsing.

Uses pint so catalog diameters written with units ("9.6 mm", "0.38 in")
are converted to millimetres instead of being guessed at.
"""

import pint

# Shared unit registry for the package
ureg = pint.UnitRegistry()

# Shorthand for creating quantities
Q_ = ureg.Quantity

millimeter = ureg.millimeter


def magnitude_in(quantity: pint.Quantity, unit: str) -> float:
    """Get the magnitude of a quantity in specified units."""
    return quantity.to(unit).magnitude


def is_length(quantity: pint.Quantity) -> bool:
    """True when the quantity has length dimensions."""
    return quantity.check("[length]")
