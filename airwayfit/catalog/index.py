"""
Catalog index - enumeration views over the raw record sets.

Builds, from scratch each time:
- brand/model options for SADs, one per canonical (name, manufacturer) key
- size options for a selected SAD brand
- ETT name options, one per canonical ETT name
- worst-case outer diameter per nominal ETT size

Every view is a pure function of its inputs; rebuilding from the same
records gives the same result.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from airwayfit.canonical.normalizer import (
    canonical_key,
    canonical_name,
    display_manufacturer,
    display_name,
)
from airwayfit.canonical.rules import CanonicalRules
from airwayfit.canonical.sizes import parse_diameter, parse_size
from airwayfit.errors import AmbiguousBrandError
from airwayfit.models.outputs import (
    BrandGroup,
    BrandOption,
    CanonicalKey,
    EttNameOption,
    SizedRecord,
    WorstCaseSize,
)
from airwayfit.models.records import Catalogs, DeviceRecord


logger = logging.getLogger(__name__)


def _brand_sort_key(group: BrandGroup) -> tuple[str, str, str, str]:
    return (
        group.display_name.casefold(),
        group.display_manufacturer.casefold(),
        group.key.name,
        group.key.manufacturer,
    )


def build_brand_groups(
    sads: list[DeviceRecord],
    rules: Optional[CanonicalRules] = None,
) -> list[BrandGroup]:
    """
    Group SAD records by canonical key.

    Records whose canonical name is empty are left out. Display strings come
    from the first record seen for each key.

    Returns:
        Brand groups ordered by display name, then display manufacturer
    """
    groups: dict[CanonicalKey, BrandGroup] = {}

    for record in sads:
        key = canonical_key(record, rules)
        if not key.is_groupable:
            logger.debug("Excluding SAD %r from grouping: empty canonical name", record.name)
            continue

        group = groups.get(key)
        if group is None:
            group = BrandGroup(
                key=key,
                display_name=display_name(record.name, rules),
                display_manufacturer=display_manufacturer(record.manufacturer, rules),
            )
            groups[key] = group

        size = parse_size(record.size)
        if size is None and record.size is not None:
            logger.debug("Unparseable size %r for SAD %r", record.size, record.name)
        group.members.append(SizedRecord(record=record, nominal_size=size))

    return sorted(groups.values(), key=_brand_sort_key)


def find_brand_group(
    sads: list[DeviceRecord],
    brand: CanonicalKey,
    rules: Optional[CanonicalRules] = None,
) -> Optional[BrandGroup]:
    """The group for one canonical key, or None."""
    for group in build_brand_groups(sads, rules):
        if group.key == brand:
            return group
    return None


def resolve_brand_key(groups: list[BrandGroup], brand: CanonicalKey) -> CanonicalKey:
    """
    Fill in the manufacturer when only a device name was given.

    A key that has a manufacturer, or that already names a group, comes back
    unchanged. A bare name resolves to the one group with that canonical name.

    Raises:
        AmbiguousBrandError: If several manufacturers list the name
    """
    if brand.manufacturer or any(g.key == brand for g in groups):
        return brand
    matches = [g for g in groups if g.key.name == brand.name]
    if len(matches) > 1:
        makers = ", ".join(g.display_manufacturer or "-" for g in matches)
        raise AmbiguousBrandError(
            f"{brand.name!r} is listed by several manufacturers ({makers}); give a manufacturer"
        )
    return matches[0].key if matches else brand


def brand_options(
    sads: list[DeviceRecord],
    rules: Optional[CanonicalRules] = None,
) -> list[BrandOption]:
    """Distinct SAD brand/model options."""
    return [
        BrandOption(
            key=group.key,
            display_name=group.display_name,
            display_manufacturer=group.display_manufacturer,
        )
        for group in build_brand_groups(sads, rules)
    ]


def size_options(
    sads: list[DeviceRecord],
    brand: CanonicalKey,
    rules: Optional[CanonicalRules] = None,
) -> list[float]:
    """Distinct parsed sizes for a brand, ascending. Empty for unknown brands."""
    group = find_brand_group(sads, brand, rules)
    return group.sizes() if group else []


def ett_name_options(
    etts: list[DeviceRecord],
    rules: Optional[CanonicalRules] = None,
) -> list[EttNameOption]:
    """Distinct ETT names, one per canonical name, ordered by display label."""
    labels: dict[str, str] = {}
    for record in etts:
        key = canonical_name(record.name, rules)
        if not key:
            logger.debug("Excluding ETT %r from name options: empty canonical name", record.name)
            continue
        labels.setdefault(key, display_name(record.name, rules))

    options = [EttNameOption(key=key, label=label) for key, label in labels.items()]
    options.sort(key=lambda o: (o.label.casefold(), o.key))
    return options


def worst_case_outer_diameters(etts: list[DeviceRecord]) -> list[WorstCaseSize]:
    """
    Largest outer diameter per nominal ETT size.

    The nominal size is the inner diameter rounded to 0.1 mm. Records missing
    either diameter are skipped.
    """
    widest: dict[float, tuple[float, int]] = {}
    for record in etts:
        inner = parse_diameter(record.internal_mm)
        outer = parse_diameter(record.external_mm)
        if inner is None or outer is None:
            continue
        size = round(inner, 1)
        current_od, count = widest.get(size, (outer, 0))
        widest[size] = (max(current_od, outer), count + 1)

    return [
        WorstCaseSize(size_mm=size, outer_diameter_mm=od, model_count=count)
        for size, (od, count) in sorted(widest.items())
    ]


class CatalogIndex(BaseModel):
    """All enumeration views for one pair of catalogs."""
    brands: list[BrandGroup] = Field(default_factory=list)
    ett_names: list[EttNameOption] = Field(default_factory=list)
    worst_case: list[WorstCaseSize] = Field(default_factory=list)

    def brand_options(self) -> list[BrandOption]:
        return [
            BrandOption(
                key=g.key,
                display_name=g.display_name,
                display_manufacturer=g.display_manufacturer,
            )
            for g in self.brands
        ]

    def group_for(self, brand: CanonicalKey) -> Optional[BrandGroup]:
        for group in self.brands:
            if group.key == brand:
                return group
        return None

    def resolve(self, brand: CanonicalKey) -> CanonicalKey:
        return resolve_brand_key(self.brands, brand)

    def sizes_for(self, brand: CanonicalKey) -> list[float]:
        group = self.group_for(brand)
        return group.sizes() if group else []


def build_catalog_index(
    catalogs: Catalogs,
    rules: Optional[CanonicalRules] = None,
) -> CatalogIndex:
    """
    Build every enumeration view for the given catalogs.

    Args:
        catalogs: SAD and ETT records
        rules: Canonicalization rules (packaged table if None)

    Returns:
        CatalogIndex
    """
    return CatalogIndex(
        brands=build_brand_groups(catalogs.sads, rules),
        ett_names=ett_name_options(catalogs.etts, rules),
        worst_case=worst_case_outer_diameters(catalogs.etts),
    )
