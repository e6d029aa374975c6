"""
Exceptions raised at the edges of airwayfit.

The matching pipeline itself does not raise for malformed records; those are
excluded. These errors cover configuration and file loading only.
"""


class AirwayFitError(Exception):
    """Base class for airwayfit errors."""


class CatalogLoadError(AirwayFitError):
    """A device catalog file is missing or is not a JSON array of records."""


class RulesLoadError(AirwayFitError):
    """The canonicalization rules file is missing or malformed."""


class AmbiguousBrandError(AirwayFitError):
    """A device name without a manufacturer matches more than one brand group."""
