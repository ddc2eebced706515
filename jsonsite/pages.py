from __future__ import annotations

import html
from pathlib import Path
from typing import Iterable, Sequence

from .content import record_summary, record_title
from .render import PageRenderer, write_text
from .taxonomy import PagePlanEntry, TaxonomyIndex
from .utils import join_url

TAXONOMY_TEMPLATE = "taxonomy"
TERMS_TEMPLATE = "terms"
NOT_FOUND_TEMPLATE = "404"


def taxonomy_label(taxonomy_id: str) -> str:
    return taxonomy_id.replace("-", " ").replace("_", " ").title()


def overview_path(output_dir: Path, taxonomy_id: str) -> Path:
    # Beside the term directory, so no term slug can collide with it.
    return output_dir / f"{taxonomy_id}.html"


def index_record_terms(plan: Iterable[PagePlanEntry]) -> dict[int, list[PagePlanEntry]]:
    """Map each member record (by object id) to the plan entries it appears in."""
    record_terms: dict[int, list[PagePlanEntry]] = {}
    for entry in plan:
        for record in entry.members:
            entries = record_terms.setdefault(id(record), [])
            # Records without an id can sit in one term more than once.
            if entries and entries[-1] is entry:
                continue
            entries.append(entry)
    return record_terms


def build_nav(taxonomy_ids: Sequence[str], root: str) -> str:
    links = [f'<a href="{root}/index.html">Home</a>']
    for taxonomy_id in taxonomy_ids:
        links.append(f'<a href="{root}/{taxonomy_id}.html">{html.escape(taxonomy_label(taxonomy_id))}</a>')
    return " ".join(links)


def build_record_cards(records: Sequence[dict], record_terms: dict, root: str, title_field: str) -> str:
    cards = []
    for record in records:
        title = html.escape(record_title(record, title_field))
        summary = html.escape(record_summary(record))
        chips = " ".join(
            f'<a class="chip chip-{entry.taxonomy_id}" href="{root}/{entry.taxonomy_id}/{entry.slug}.html">'
            f"{html.escape(entry.display_name)}</a>"
            for entry in record_terms.get(id(record), [])
        )
        summary_html = f'<p class="item-summary">{summary}</p>' if summary else ""
        cards.append(
            '<article class="item-card">'
            f'<h2 class="item-title">{title}</h2>'
            f"{summary_html}"
            f'<div class="item-terms">{chips}</div>'
            "</article>"
        )
    return "\n".join(cards) if cards else '<p class="empty">No items.</p>'


def build_index_page(
    renderer: PageRenderer,
    output_dir: Path,
    records: Sequence[dict],
    record_terms: dict,
    taxonomy_ids: Sequence[str],
    args: object,
) -> None:
    root = "."
    renderer.render_to(
        getattr(args, "template", "index"),
        output_dir / "index.html",
        title=html.escape(f"{args.site_name} | Home"),
        root=root,
        nav=build_nav(taxonomy_ids, root),
        count=str(len(records)),
        items=build_record_cards(records, record_terms, root, args.title_field),
    )


def build_term_pages(
    renderer: PageRenderer,
    output_dir: Path,
    plan: Sequence[PagePlanEntry],
    record_terms: dict,
    taxonomy_ids: Sequence[str],
    args: object,
) -> int:
    root = ".."
    nav = build_nav(taxonomy_ids, root)
    for entry in plan:
        renderer.render_to(
            TAXONOMY_TEMPLATE,
            entry.output_path(output_dir),
            title=html.escape(f"{entry.display_name} | {args.site_name}"),
            root=root,
            nav=nav,
            taxonomy=html.escape(taxonomy_label(entry.taxonomy_id)),
            taxonomy_id=entry.taxonomy_id,
            term=html.escape(entry.display_name),
            count=str(len(entry.members)),
            items=build_record_cards(entry.members, record_terms, root, args.title_field),
        )
    return len(plan)


def build_taxonomy_overviews(
    renderer: PageRenderer,
    output_dir: Path,
    index: TaxonomyIndex,
    args: object,
) -> None:
    root = "."
    taxonomy_ids = list(index.taxonomies)
    nav = build_nav(taxonomy_ids, root)
    for taxonomy_id, terms in index.taxonomies.items():
        rows = []
        for slug, entry in sorted(terms.items(), key=lambda x: x[1].display_name.lower()):
            rows.append(
                f'<li><a href="./{taxonomy_id}/{slug}.html">{html.escape(entry.display_name)}</a>'
                f'<span class="count">{len(entry.members)}</span></li>'
            )
        label = taxonomy_label(taxonomy_id)
        renderer.render_to(
            TERMS_TEMPLATE,
            overview_path(output_dir, taxonomy_id),
            title=html.escape(f"{label} | {args.site_name}"),
            root=root,
            nav=nav,
            taxonomy=html.escape(label),
            count=str(len(terms)),
            terms="\n".join(rows) if rows else "<li>No terms yet.</li>",
        )


def build_sitemap(output_dir: Path, plan: Sequence[PagePlanEntry], taxonomy_ids: Sequence[str], site_url: str) -> None:
    if not site_url:
        return
    site_url = site_url.rstrip("/")
    urls = [site_url + "/"]
    for taxonomy_id in taxonomy_ids:
        urls.append(join_url(site_url, f"{taxonomy_id}.html"))
    for entry in plan:
        urls.append(join_url(site_url, entry.taxonomy_id, f"{entry.slug}.html"))
    items = [f"<url>\n<loc>{html.escape(url)}</loc>\n</url>" for url in urls]
    sitemap = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )
    write_text(output_dir / "sitemap.xml", sitemap)


def build_404(renderer: PageRenderer, output_dir: Path, taxonomy_ids: Sequence[str], args: object) -> None:
    root = "."
    renderer.render_to(
        NOT_FOUND_TEMPLATE,
        output_dir / "404.html",
        title=html.escape(f"404 | {args.site_name}"),
        root=root,
        nav=build_nav(taxonomy_ids, root),
    )
