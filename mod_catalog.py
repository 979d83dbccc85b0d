"""
Loading of the mods_data.json catalog.

The catalog is a JSON array of ``{"name": "<canonical key>", "type": "<tag>"}``
objects. Loading never fails hard: a missing, unreadable or malformed file
yields an empty catalog, and individual bad records are skipped, each with a
logged diagnostic.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from classifier_errors import CatalogPathError
from mod_models import Catalog, CatalogEntry

logger = logging.getLogger(__name__)

EMPTY_CATALOG_TEXT = "[]"


def ensure_catalog_file(path: Path) -> bool:
    """Create the catalog containing an empty array if it does not exist.

    Returns True when the file was created. Raises CatalogPathError when the
    path is taken by something other than a regular file; OSError from the
    write propagates.
    """
    if path.exists() or path.is_symlink():
        if not path.is_file():
            raise CatalogPathError(f"'{path}' exists but is not a file")
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(EMPTY_CATALOG_TEXT, encoding="utf-8")
    return True


def parse_catalog(data: Any) -> Catalog:
    """Build a Catalog from an already decoded JSON value."""
    if not isinstance(data, list):
        logger.error("Catalog root is not a JSON array; make sure mods_data.json holds an array of mod entries")
        return Catalog()

    entries: list[CatalogEntry] = []
    for index, item in enumerate(data):
        try:
            entries.append(CatalogEntry.model_validate(item))
        except ValidationError:
            logger.error(
                f"Skipping invalid catalog entry #{index}: every entry must be an object "
                f"with string 'name' and 'type' fields"
            )
    return Catalog(entries)


def load_catalog(path: Path) -> Catalog:
    """Read and parse the catalog file, returning an empty catalog on any error."""
    try:
        # utf-8-sig tolerates the BOM that Windows editors like to add
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot open catalog file {path}: {e}")
        return Catalog()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse catalog file {path}: {e}")
        return Catalog()

    catalog = parse_catalog(data)
    logger.debug(f"Loaded {len(catalog)} catalog entries from {path}")
    return catalog
