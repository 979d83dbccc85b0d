import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

INPUT_DIR_NAME = "Input"
OUTPUT_DIR_NAME = "Output"
CATALOG_FILENAME = "mods_data.json"
LOG_FILENAME = "mod_classifier.log"

# Environment overrides
ENV_INPUT_DIR = "MOD_CLASSIFIER_INPUT_DIR"
ENV_OUTPUT_DIR = "MOD_CLASSIFIER_OUTPUT_DIR"
ENV_CATALOG = "MOD_CLASSIFIER_CATALOG"
ENV_LOG_FILE = "MOD_CLASSIFIER_LOG_FILE"
ENV_NO_PAUSE = "MOD_CLASSIFIER_NO_PAUSE"

_TRUTHY = ("1", "true", "yes", "on")


def executable_dir() -> Path:
    """Directory of the frozen executable, or the working directory when run from source."""
    if getattr(sys, "frozen", False) and sys.executable:
        return Path(sys.executable).resolve().parent
    return Path.cwd()


@dataclass
class ClassifierSettings:
    input_dir: Path
    output_dir: Path
    catalog_path: Path
    log_path: Path
    pause: bool = True
    dry_run: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ClassifierSettings:
    """Defaults, overridden by MOD_CLASSIFIER_* environment variables."""
    env = os.environ if environ is None else environ

    def _path(name: str, default: Path) -> Path:
        value = (env.get(name) or "").strip()
        return Path(value) if value else default

    no_pause = (env.get(ENV_NO_PAUSE) or "").strip().lower() in _TRUTHY
    return ClassifierSettings(
        input_dir=_path(ENV_INPUT_DIR, Path(INPUT_DIR_NAME)),
        output_dir=_path(ENV_OUTPUT_DIR, Path(OUTPUT_DIR_NAME)),
        catalog_path=_path(ENV_CATALOG, Path(CATALOG_FILENAME)),
        log_path=_path(ENV_LOG_FILE, executable_dir() / LOG_FILENAME),
        pause=not no_pause,
    )
