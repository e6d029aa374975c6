"""
Canonicalization rules.

Trademark marks, trailing descriptor phrases and manufacturer misspellings are
data, not code. The packaged table lives in airwayfit/data/canonical_rules.json;
pass a different file to extend it without touching the normalizer.
"""

import json
import importlib.resources as resources
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, ValidationError

from airwayfit.errors import RulesLoadError


logger = logging.getLogger(__name__)

DEFAULT_RULES_NAME = "canonical_rules.json"


class CanonicalRules(BaseModel):
    """
    Immutable rule table for the canonicalizer.

    manufacturer_aliases maps each canonical manufacturer spelling to the
    misspellings seen in catalogs, e.g. {"Intersurgical": ["Intersurgcial"]}.
    """
    trademark_marks: tuple[str, ...] = Field(
        default=("®", "™", "©", "℠"),
        description="Marks removed from names before matching",
    )
    descriptor_phrases: tuple[str, ...] = Field(
        default=(),
        description="Trailing phrases stripped from canonical names (case-insensitive)",
    )
    manufacturer_aliases: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Canonical manufacturer -> known misspellings",
    )
    placeholder: str = Field(default="Unknown", description="Display name used when a name is empty")

    model_config = {"frozen": True}

    # Reverse lookup: lower-cased variant -> canonical spelling (built on init)
    _alias_lookup: dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        lookup = {}
        for canonical, aliases in self.manufacturer_aliases.items():
            canonical_clean = " ".join(canonical.split())
            lookup[canonical_clean.lower()] = canonical_clean
            for alias in aliases:
                lookup[" ".join(alias.split()).lower()] = canonical_clean
        self._alias_lookup = lookup

    def resolve_manufacturer(self, collapsed: str) -> str:
        """Return the canonical spelling for a whitespace-collapsed manufacturer."""
        return self._alias_lookup.get(collapsed.lower(), collapsed)


def _read_packaged_rules() -> dict:
    resource = resources.files("airwayfit.data").joinpath(DEFAULT_RULES_NAME)
    return json.loads(resource.read_text(encoding="utf-8"))


def load_canonical_rules(path: Optional[Union[str, Path]] = None) -> CanonicalRules:
    """
    Load canonicalization rules from JSON.

    Args:
        path: Path to a rules JSON file. If None, uses the packaged table.

    Returns:
        CanonicalRules

    Raises:
        RulesLoadError: If the file is missing, not JSON, or has bad fields
    """
    try:
        if path is None:
            data = _read_packaged_rules()
        else:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        rules = CanonicalRules(**data)
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        raise RulesLoadError(f"Could not load canonical rules from {path or DEFAULT_RULES_NAME}: {e}") from e

    logger.debug(
        "Loaded %d descriptor phrases and %d manufacturer alias groups",
        len(rules.descriptor_phrases),
        len(rules.manufacturer_aliases),
    )
    return rules


DEFAULT_RULES = load_canonical_rules()
