from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

from .errors import SiteError

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})


def parse_bool(value: object, default: bool = False) -> bool:
    """Read a config flag; anything not clearly on or off keeps ``default``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    return default


def parse_float(value: object, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, *parts: str) -> str:
    segments = [base.rstrip("/")]
    segments.extend(part.strip("/") for part in parts if part.strip("/"))
    return "/".join(segments)


def setup_logging(verbose: bool = False) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    """Delete the output directory, but only when it sits strictly inside the project."""
    if not output_dir.exists():
        return
    target = output_dir.resolve()
    root = project_root.resolve()
    if target == root or not target.is_relative_to(root):
        raise SiteError(f"Refusing to clean {target}: it is not a directory inside {root}")
    shutil.rmtree(target)
