from __future__ import annotations

import argparse
import datetime as dt
import html
import logging
import sys
import time
from pathlib import Path

from .config import load_config, load_taxonomies, resolve_intro_html
from .data import DEFAULT_TIMEOUT, load_records, resolve_source
from .errors import ConfigError, SiteError
from .pages import (
    build_404,
    build_index_page,
    build_sitemap,
    build_taxonomy_overviews,
    build_term_pages,
    index_record_terms,
)
from .render import PageRenderer, copy_static, write_text
from .taxonomy import TaxonomyDefinition, build_index, emit_plan
from .utils import clean_output_dir, parse_bool, parse_float, setup_logging

logger = logging.getLogger(__name__)


def build_site(args: argparse.Namespace, definitions: list[TaxonomyDefinition]) -> int:
    output_dir = Path(args.output)
    templates_dir = Path(args.templates)
    static_dir = Path(args.static)
    project_root = Path.cwd()
    config_dir = Path(args.config).resolve().parent

    if not templates_dir.exists():
        print(f"Templates directory not found: {templates_dir}", file=sys.stderr)
        sys.exit(1)

    source = resolve_source(args.data)

    if args.clean:
        logger.info("Cleaning output directory: %s", output_dir)
        clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    if static_dir.exists():
        copy_static(static_dir, output_dir)
    if args.write_nojekyll:
        write_text(output_dir / ".nojekyll", "")

    records = load_records(source, base_dir=config_dir, timeout=args.timeout)

    renderer = PageRenderer(
        templates_dir,
        site_name=html.escape(args.site_name),
        site_description=html.escape(args.site_description),
        year=str(dt.datetime.now().year),
        intro=resolve_intro_html(args),
    )

    if not definitions:
        logger.warning("No taxonomies defined in config.")
    index = build_index(records, definitions)
    plan = list(emit_plan(index))
    taxonomy_ids = [definition.taxonomy_id for definition in definitions]
    record_terms = index_record_terms(plan)

    build_index_page(renderer, output_dir, records, record_terms, taxonomy_ids, args)
    page_count = build_term_pages(renderer, output_dir, plan, record_terms, taxonomy_ids, args)
    build_taxonomy_overviews(renderer, output_dir, index, args)
    if args.enable_sitemap:
        build_sitemap(output_dir, plan, taxonomy_ids, args.site_url)
    if args.enable_404:
        build_404(renderer, output_dir, taxonomy_ids, args)

    print(f"Rendered {len(records)} items and {page_count} taxonomy pages.")
    return page_count


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(config.get(key), default)

    parser = argparse.ArgumentParser(description="Static site generator for JSON records grouped by taxonomy.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--data",
        default=cfg_value("data", ""),
        help="URL or path of the JSON data source.",
    )
    parser.add_argument(
        "--output",
        default=cfg_str("output", cfg_str("outputDir", "public")),
        help="Output directory for the site.",
    )
    parser.add_argument("--templates", default=cfg_str("templates", "templates"), help="Directory containing templates.")
    parser.add_argument("--static", default=cfg_str("static", "static"), help="Directory containing static assets.")
    parser.add_argument("--template", default=cfg_str("template", "index"), help="Template used for the index page.")
    parser.add_argument("--site-name", default=cfg_str("site_name", "JSON Site"), help="Site title.")
    parser.add_argument(
        "--site-description",
        default=cfg_str("site_description", "Items grouped by taxonomy."),
        help="Site description.",
    )
    parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", ""),
        help="Public site URL used for the sitemap.",
    )
    parser.add_argument(
        "--title-field",
        default=cfg_str("title_field", "title"),
        help="Record field used as the item title.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--enable-sitemap",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_sitemap", True),
        help="Generate sitemap.xml.",
    )
    parser.add_argument(
        "--enable-404",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_404", True),
        help="Generate 404.html.",
    )
    parser.add_argument(
        "--write-nojekyll",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("write_nojekyll", False),
        help="Write .nojekyll in the output directory.",
    )
    parser.add_argument(
        "--timeout",
        default=parse_float(config.get("timeout"), DEFAULT_TIMEOUT),
        type=float,
        help="Timeout in seconds when fetching data over HTTP.",
    )
    parser.add_argument("--intro-text", default=cfg_str("intro_text", ""), help="Text shown on the index page.")
    parser.add_argument("--intro-html", default=cfg_str("intro_html", ""), help="HTML shown on the index page.")
    parser.add_argument(
        "--intro-file",
        default=cfg_str("intro_file", ""),
        help="Path to a Markdown/HTML/text file shown on the index page.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress messages.")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        definitions = load_taxonomies(config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    start = time.perf_counter()
    try:
        build_site(args, definitions)
    except SiteError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output}")
