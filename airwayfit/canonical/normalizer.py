"""
Name and manufacturer normalization.

Catalog text for the same product varies a lot:

    "AuraGain Supraglottic Airway Device"
    "AuraGain®, Supraglottic Airway"

Both must land on the key "auragain". Every function here is pure and total:
non-string input gives an empty string and nothing raises.
"""

from typing import Any, Optional

from airwayfit.canonical.rules import CanonicalRules, DEFAULT_RULES
from airwayfit.models.outputs import CanonicalKey
from airwayfit.models.records import DeviceRecord


# Left over after a descriptor is cut, e.g. "LMA Supreme - Supraglottic Airway"
_TRAILING_JUNK = " -–—/:;"


def _collapse(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return " ".join(text.split())


def _strip_marks(text: str, rules: CanonicalRules) -> str:
    for mark in rules.trademark_marks:
        text = text.replace(mark, "")
    return text


def _before_first_comma(text: str) -> str:
    return text.split(",", 1)[0]


def _strip_descriptors(text: str, rules: CanonicalRules) -> str:
    """
    Remove known trailing descriptor phrases until none apply.

    A phrase is only removed when something precedes it, so a product that is
    literally called "Device" keeps its name.
    """
    phrases = [p.lower() for p in rules.descriptor_phrases if p.strip()]
    changed = True
    while changed:
        changed = False
        for phrase in phrases:
            if text.endswith(" " + phrase):
                stripped = text[: -len(phrase)].rstrip(_TRAILING_JUNK)
                if stripped:
                    text = stripped
                    changed = True
    return text


def canonical_name(raw: Any, rules: Optional[CanonicalRules] = None) -> str:
    """
    Matching key for a device name.

    Strips marks, keeps the text before the first comma, strips trailing
    descriptors, collapses whitespace and lower-cases.
    """
    if not isinstance(raw, str):
        return ""
    rules = rules or DEFAULT_RULES
    text = _before_first_comma(_strip_marks(raw, rules))
    text = _collapse(text).lower()
    return _strip_descriptors(text, rules)


def display_name(raw: Any, rules: Optional[CanonicalRules] = None) -> str:
    """Human-readable device name; the placeholder when nothing is left."""
    rules = rules or DEFAULT_RULES
    if not isinstance(raw, str):
        return rules.placeholder
    text = _collapse(_before_first_comma(_strip_marks(raw, rules)))
    return text or rules.placeholder


def display_manufacturer(raw: Any, rules: Optional[CanonicalRules] = None) -> str:
    """Manufacturer with whitespace collapsed and known misspellings corrected."""
    if not isinstance(raw, str):
        return ""
    rules = rules or DEFAULT_RULES
    collapsed = _collapse(raw)
    if not collapsed:
        return ""
    return rules.resolve_manufacturer(collapsed)


def canonical_manufacturer(raw: Any, rules: Optional[CanonicalRules] = None) -> str:
    """Matching key for a manufacturer."""
    return display_manufacturer(raw, rules).lower()


def canonical_key(record: DeviceRecord, rules: Optional[CanonicalRules] = None) -> CanonicalKey:
    """(canonical name, canonical manufacturer) for one record."""
    return CanonicalKey(
        name=canonical_name(record.name, rules),
        manufacturer=canonical_manufacturer(record.manufacturer, rules),
    )
