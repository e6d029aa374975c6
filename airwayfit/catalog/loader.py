"""
Device catalog loader.

Loads SAD and ETT records from JSON files. A missing or broken file degrades
to an empty catalog by default, so the matcher keeps working with zero
options instead of failing.
"""

import json
import importlib.resources as resources
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from airwayfit.errors import CatalogLoadError
from airwayfit.models.records import Catalogs, DeviceRecord


logger = logging.getLogger(__name__)

# Default catalog filenames
DEFAULT_SAD_NAME = "sad_catalog.json"
DEFAULT_ETT_NAME = "ett_catalog.json"


def get_project_root() -> Path:
    """Get the project root directory."""
    # Try to find project root by looking for pyproject.toml
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    # Fallback to current working directory
    return Path.cwd()


def _resource_path(filename: str) -> Optional[Path]:
    """
    Resolve a packaged data file inside airwayfit.data.

    Returns a filesystem path or None if the resource is unavailable.
    """
    try:
        resource = resources.files("airwayfit.data").joinpath(filename)
        if resource.is_file():
            with resources.as_file(resource) as tmp_path:
                return Path(tmp_path)
    except (ModuleNotFoundError, OSError):
        return None
    return None


def resolve_catalog_file(filename: str) -> Path:
    """Find the best available path for a catalog file."""
    candidates = [
        get_project_root() / "data" / filename,  # project / editable install
        Path.cwd() / "data" / filename,          # current working dir
    ]

    pkg_path = _resource_path(filename)
    if pkg_path:
        candidates.append(pkg_path)

    for candidate in candidates:
        if candidate.exists():
            return candidate

    # Default to first candidate for error reporting
    return candidates[0]


def catalog_exists(path: Optional[str] = None, default_name: str = DEFAULT_SAD_NAME) -> bool:
    """Check if a catalog JSON file exists."""
    file_path = Path(path) if path else resolve_catalog_file(default_name)
    return file_path.exists()


def load_records(path: Optional[str] = None, default_name: str = DEFAULT_SAD_NAME) -> list[DeviceRecord]:
    """
    Load device records from a JSON array.

    Individual rows that are not JSON objects are skipped. Rows with
    malformed diameters are kept; they are excluded later, at match time.

    Args:
        path: Path to JSON file. If None, resolves default_name.
        default_name: Catalog filename used when path is None

    Returns:
        List of DeviceRecord objects

    Raises:
        CatalogLoadError: If the file is missing, not JSON, or not an array
    """
    file_path = Path(path) if path else resolve_catalog_file(default_name)

    if not file_path.exists():
        raise CatalogLoadError(f"Catalog not found at {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Could not read catalog {file_path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogLoadError(f"Catalog {file_path} must contain a JSON array")

    records = []
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            logger.debug("Skipping row %d of %s: not an object", position, file_path.name)
            continue
        try:
            records.append(DeviceRecord(**item))
        except ValidationError as e:
            logger.debug("Skipping row %d of %s: %s", position, file_path.name, e)

    logger.info("Loaded %d records from %s", len(records), file_path)
    return records


def load_catalogs(
    sad_path: Optional[str] = None,
    ett_path: Optional[str] = None,
    strict: bool = False,
) -> Catalogs:
    """
    Load both SAD and ETT catalogs.

    Args:
        sad_path: Path to SAD JSON (optional)
        ett_path: Path to ETT JSON (optional)
        strict: Raise instead of degrading to an empty catalog

    Returns:
        Catalogs with whatever could be loaded

    Raises:
        CatalogLoadError: Only when strict is True
    """
    loaded = {}
    for label, path, default_name in (
        ("sads", sad_path, DEFAULT_SAD_NAME),
        ("etts", ett_path, DEFAULT_ETT_NAME),
    ):
        try:
            loaded[label] = load_records(path, default_name)
        except CatalogLoadError as e:
            if strict:
                raise
            logger.warning("%s; continuing with an empty catalog", e)
            loaded[label] = []

    return Catalogs(**loaded)
