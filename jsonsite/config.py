from __future__ import annotations

import html
import json
import logging
import sys
from pathlib import Path

import markdown
import yaml

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

from .taxonomy import TaxonomyDefinition, parse_taxonomies

logger = logging.getLogger(__name__)


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be an object: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def load_taxonomies(config: dict) -> list[TaxonomyDefinition]:
    """Read the taxonomy definitions and structured field list from config.

    ``taxonomies`` maps a taxonomy id (the output directory name) to the
    record field carrying its terms, e.g. ``{"tag": "tags"}``.
    ``structured_fields`` lists fields whose entries look like
    ``{"name": "..."}`` instead of plain strings.
    """
    return parse_taxonomies(config.get("taxonomies"), config.get("structured_fields"))


INTRO_MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


def _text_to_html(text: str) -> str:
    return "<p>" + html.escape(text).replace("\n", "<br>") + "</p>"


def read_intro_file(path: Path) -> str:
    """Render an intro file by suffix: HTML as-is, Markdown converted, anything else escaped."""
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".html", ".htm"}:
        return text
    if suffix in {".md", ".markdown"}:
        return markdown.markdown(text, extensions=INTRO_MARKDOWN_EXTENSIONS)
    return _text_to_html(text)


def resolve_intro_html(args: object) -> str:
    """Pick the index page intro.

    The first non-empty source wins: ``intro_html``, then ``intro_file``
    (relative to the config file), then ``intro_text``, then the site
    description.
    """
    snippet = (getattr(args, "intro_html", "") or "").strip()
    if snippet:
        return snippet

    intro_file = (getattr(args, "intro_file", "") or "").strip()
    if intro_file:
        path = Path(intro_file)
        if not path.is_absolute():
            path = Path(getattr(args, "config", "site.toml")).resolve().parent / path
        if path.is_file():
            return read_intro_file(path)
        logger.warning("Intro file not found: %s", path)

    text = (getattr(args, "intro_text", "") or "").strip()
    if text:
        return _text_to_html(text)
    return _text_to_html(getattr(args, "site_description", "") or "")
