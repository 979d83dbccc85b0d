"""
Command line entry point for the mod classifier.

Run without arguments next to an ``Input`` folder and a ``mods_data.json``
catalog; matched mods are copied into category folders under ``Output``.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from classifier_config import ClassifierSettings, load_settings
from classifier_errors import CatalogPathError, InputDirectoryError, ModClassifierError
from classifier_logging import configure_logging, enable_utf8_console, shutdown_logging
from mod_catalog import ensure_catalog_file, load_catalog
from mod_classifier import classify_mods, ensure_output_tree

logger = logging.getLogger(__name__)


def wait_for_keypress() -> None:
    """Block until a single key is pressed, so a double-clicked console stays open."""
    if not sys.stdin or not sys.stdin.isatty():
        return
    print("Press any key to exit...", flush=True)
    if sys.platform == "win32":
        import msvcrt
        msvcrt.getch()
        return

    import termios
    import tty
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        sys.stdin.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def ensure_input_dir(input_dir: Path) -> None:
    if not input_dir.exists():
        logger.info(f"Input folder '{input_dir}' does not exist, creating it...")
        try:
            input_dir.mkdir(parents=True)
        except OSError as e:
            raise InputDirectoryError(f"Cannot create input folder '{input_dir}': {e}") from e
    elif not input_dir.is_dir():
        raise InputDirectoryError(f"'{input_dir}' exists but is not a directory")


def prepare_catalog(catalog_path: Path) -> None:
    try:
        created = ensure_catalog_file(catalog_path)
    except OSError as e:
        raise CatalogPathError(f"Cannot create or write '{catalog_path}': {e}") from e
    if created:
        logger.info(f"Catalog '{catalog_path}' did not exist; created it with an empty array")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mod-classifier",
        description="Copy mod files into category folders using a mods_data.json catalog.",
    )
    parser.add_argument("--input", type=Path, help="Folder holding the mod files (default: Input)")
    parser.add_argument("--output", type=Path, help="Folder receiving the category folders (default: Output)")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON file (default: mods_data.json)")
    parser.add_argument("--log-file", type=Path, help="Log file (default: mod_classifier.log next to the executable)")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be copied without copying")
    parser.add_argument("--no-pause", action="store_true", help="Exit without waiting for a keypress")
    return parser


def resolve_settings(args: argparse.Namespace) -> ClassifierSettings:
    settings = load_settings()
    if args.input is not None:
        settings.input_dir = args.input
    if args.output is not None:
        settings.output_dir = args.output
    if args.catalog is not None:
        settings.catalog_path = args.catalog
    if args.log_file is not None:
        settings.log_path = args.log_file
    if args.dry_run:
        settings.dry_run = True
    if args.no_pause:
        settings.pause = False
    return settings


def run(settings: ClassifierSettings) -> int:
    logger.info("Program started.")

    try:
        ensure_input_dir(settings.input_dir)
        prepare_catalog(settings.catalog_path)
        if not settings.dry_run:
            ensure_output_tree(settings.output_dir)
    except ModClassifierError as e:
        logger.error(str(e))
        return 1

    logger.info("Reading mod catalog...")
    catalog = load_catalog(settings.catalog_path)
    if not catalog:
        logger.info(
            f"No mod entries were read from '{settings.catalog_path}', or the file is empty or invalid. "
            f"Make sure it contains valid mod entries."
        )
    else:
        per_category = ", ".join(
            f"{category.directory}={count}" for category, count in catalog.counts().items() if count
        )
        logger.info(f"Loaded {len(catalog)} catalog entries ({per_category})")

    logger.info("Classifying mods...")
    try:
        summary = classify_mods(catalog, settings.input_dir, settings.output_dir, dry_run=settings.dry_run)
    except ModClassifierError as e:
        logger.error(str(e))
        return 1
    counts = summary.to_dict()
    logger.info(
        f"Processed {counts['total_mods']} file(s): {counts['copied']} copied, "
        f"{counts['would_copy']} would be copied, {counts['skipped_existing']} already present, "
        f"{counts['unmatched']} not in catalog, {counts['failed']} failed"
    )
    logger.info("Mod classification finished!")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)

    enable_utf8_console()
    configure_logging(settings.log_path)
    try:
        code = run(settings)
        if code == 0 and settings.pause:
            wait_for_keypress()
        return code
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
