"""
Device catalog loading and enumeration views.
"""

from airwayfit.catalog.loader import (
    load_records,
    load_catalogs,
    catalog_exists,
    DEFAULT_SAD_NAME,
    DEFAULT_ETT_NAME,
)
from airwayfit.catalog.index import (
    CatalogIndex,
    build_catalog_index,
    build_brand_groups,
    find_brand_group,
    resolve_brand_key,
    brand_options,
    size_options,
    ett_name_options,
    worst_case_outer_diameters,
)

__all__ = [
    "load_records",
    "load_catalogs",
    "catalog_exists",
    "DEFAULT_SAD_NAME",
    "DEFAULT_ETT_NAME",
    "CatalogIndex",
    "build_catalog_index",
    "build_brand_groups",
    "find_brand_group",
    "resolve_brand_key",
    "brand_options",
    "size_options",
    "ett_name_options",
    "worst_case_outer_diameters",
]
