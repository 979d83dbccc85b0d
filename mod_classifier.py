"""
Mod Classification
==================
Sorts the mod files found directly inside an input directory into category
subdirectories of an output directory, using the catalog to map each file's
canonical name to a category.

Source files are only ever copied, never moved or modified. A file whose
destination already exists is left alone, so repeated runs are cheap.
"""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from classifier_errors import InputDirectoryError, OutputDirectoryError
from mod_models import Catalog, ModCategory
from mod_name_normalizer import normalize_mod_filename

logger = logging.getLogger(__name__)


class ModAction(str, Enum):
    COPIED = "copied"
    WOULD_COPY = "would_copy"
    SKIPPED_EXISTING = "skipped_existing"
    UNMATCHED = "unmatched"
    FAILED = "failed"


@dataclass
class ModResult:
    filename: str
    key: str
    action: ModAction
    category: Optional[ModCategory] = None
    destination: Optional[Path] = None
    error: str = ""

    def to_dict(self):
        return {
            "filename": self.filename,
            "key": self.key,
            "action": self.action.value,
            "category": self.category.value if self.category else None,
            "destination": str(self.destination) if self.destination else None,
            "error": self.error,
        }


@dataclass
class ClassificationSummary:
    dry_run: bool = False
    results: list[ModResult] = field(default_factory=list)

    def count(self, action: ModAction) -> int:
        return sum(1 for r in self.results if r.action == action)

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self):
        return {
            "total_mods": self.total,
            "copied": self.count(ModAction.COPIED),
            "would_copy": self.count(ModAction.WOULD_COPY),
            "skipped_existing": self.count(ModAction.SKIPPED_EXISTING),
            "unmatched": self.count(ModAction.UNMATCHED),
            "failed": self.count(ModAction.FAILED),
            "dry_run": self.dry_run,
            "mods": [r.to_dict() for r in self.results],
        }


# ═══════════════════════════════════════════════════════════════
#  Output tree
# ═══════════════════════════════════════════════════════════════

def ensure_output_tree(output_dir: Path) -> None:
    """Create the output root and one subdirectory per category."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for directory in ModCategory.directories():
            (output_dir / directory).mkdir(exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create output directory {output_dir}: {e}") from e


def _copy_mod(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    # Whatever sits at the destination is not a regular file; replace it.
    if dest.is_symlink():
        dest.unlink()
    elif dest.is_dir():
        raise IsADirectoryError(f"destination {dest} is a directory")
    elif dest.exists():
        dest.unlink()
    try:
        shutil.copy2(src, dest)
    except OSError:
        dest.unlink(missing_ok=True)
        raise


# ═══════════════════════════════════════════════════════════════
#  Classification
# ═══════════════════════════════════════════════════════════════

def classify_mod(src: Path, catalog: Catalog, output_dir: Path, dry_run: bool = False) -> ModResult:
    """Classify a single mod file and copy it into its category directory."""
    filename = src.name
    key = normalize_mod_filename(filename)
    category = catalog.lookup(key)

    if category is None:
        logger.error(f"No catalog entry for mod: {filename} (clean name: {key})")
        return ModResult(filename=filename, key=key, action=ModAction.UNMATCHED)

    target_dir = category.directory
    dest = output_dir / target_dir / filename
    result = ModResult(filename=filename, key=key, action=ModAction.COPIED, category=category, destination=dest)

    if dest.is_file():
        logger.info(f"Skipped mod: {filename}, already present in target directory: {target_dir}")
        result.action = ModAction.SKIPPED_EXISTING
        return result

    if dry_run:
        logger.info(f"Would classify mod: {filename} (clean name: {key}) to {target_dir}")
        result.action = ModAction.WOULD_COPY
        return result

    try:
        _copy_mod(src, dest)
    except OSError as e:
        logger.error(f"Failed to classify mod {filename}: {e}")
        result.action = ModAction.FAILED
        result.error = str(e)
        return result

    logger.info(f"Classified mod: {filename} (clean name: {key}) to {target_dir}")
    return result


def classify_mods(catalog: Catalog, input_dir: Path, output_dir: Path, dry_run: bool = False) -> ClassificationSummary:
    """Classify every regular file directly inside input_dir.

    Subdirectories are not descended into. Each file is handled on its own,
    so two files that share a canonical name both end up in the same
    category directory under their own filenames.
    """
    if not dry_run:
        ensure_output_tree(output_dir)

    try:
        entries = sorted(input_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise InputDirectoryError(f"Cannot read input folder '{input_dir}': {e}") from e

    summary = ClassificationSummary(dry_run=dry_run)
    for entry in entries:
        if not entry.is_file():
            continue
        summary.results.append(classify_mod(entry, catalog, output_dir, dry_run=dry_run))

    logger.debug(f"Classification summary: {summary.to_dict()}")
    return summary
