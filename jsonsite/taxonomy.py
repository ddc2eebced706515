"""Taxonomy aggregation: term extraction, index fold and page plan.

The index is built in one sequential fold per taxonomy and only read
afterwards; ``emit_plan`` never sees a partially populated term.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .content import NO_IDENTITY, record_identity, record_label, slugify
from .errors import ConfigError

logger = logging.getLogger(__name__)

# Overview pages are written to <output>/<taxonomy_id>.html beside these pages.
RESERVED_TAXONOMY_IDS = frozenset({"index", "404"})


class TermShape(enum.Enum):
    SCALAR = "scalar"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class TaxonomyDefinition:
    taxonomy_id: str
    source_field: str
    shape: TermShape = TermShape.SCALAR


@dataclass
class TermEntry:
    slug: str
    display_name: str
    members: list[dict] = field(default_factory=list)
    seen: set = field(default_factory=set, repr=False)

    def add(self, record: dict) -> bool:
        identity = record_identity(record)
        if identity is NO_IDENTITY:
            self.members.append(record)
            return True
        key = identity_key(identity)
        if key in self.seen:
            return False
        self.seen.add(key)
        self.members.append(record)
        return True


@dataclass
class TaxonomyIndex:
    taxonomies: dict[str, dict[str, TermEntry]] = field(default_factory=dict)

    def terms(self, taxonomy_id: str) -> dict[str, TermEntry]:
        return self.taxonomies.get(taxonomy_id, {})

    def term(self, taxonomy_id: str, slug: str) -> TermEntry | None:
        return self.terms(taxonomy_id).get(slug)


@dataclass(frozen=True)
class PagePlanEntry:
    taxonomy_id: str
    slug: str
    display_name: str
    members: tuple[dict, ...]

    def output_path(self, root: Path) -> Path:
        return Path(root) / self.taxonomy_id / f"{self.slug}.html"


def identity_key(identity: object) -> object:
    try:
        hash(identity)
    except TypeError:
        return ("unhashable", repr(identity))
    # 1 and True hash equal; keep the type so they stay distinct identities.
    return (type(identity).__name__, identity)


def parse_taxonomies(value: object, structured_fields: Iterable[str] = ()) -> list[TaxonomyDefinition]:
    """Turn the ``taxonomies`` config mapping into ordered definitions.

    Raises ConfigError for anything that is not a mapping of slug-safe
    taxonomy ids to non-empty field names.
    """
    if value is None:
        return []
    if not isinstance(value, Mapping):
        raise ConfigError(f"taxonomies must be a mapping of taxonomy id to field name, got {type(value).__name__}")
    if structured_fields is None:
        structured_fields = ()
    elif isinstance(structured_fields, str):
        structured_fields = [structured_fields]
    elif not isinstance(structured_fields, (list, tuple, set, frozenset)):
        raise ConfigError(
            f"structured_fields must be a field name or a list of field names, got {type(structured_fields).__name__}"
        )
    structured = set()
    for item in structured_fields:
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"structured_fields entries must be non-empty strings, got {item!r}")
        structured.add(item.strip())

    definitions = []
    for taxonomy_id, source_field in value.items():
        if not isinstance(taxonomy_id, str) or not taxonomy_id.strip():
            raise ConfigError(f"Invalid taxonomy id: {taxonomy_id!r}")
        if not isinstance(source_field, str) or not source_field.strip():
            raise ConfigError(f"Taxonomy {taxonomy_id!r} needs a source field name, got {source_field!r}")
        taxonomy_id = taxonomy_id.strip()
        if slugify(taxonomy_id) != taxonomy_id:
            raise ConfigError(
                f"Taxonomy id {taxonomy_id!r} is used as a directory name and must already be a slug "
                f"(try {slugify(taxonomy_id)!r})"
            )
        if taxonomy_id in RESERVED_TAXONOMY_IDS:
            raise ConfigError(f"Taxonomy id {taxonomy_id!r} clashes with the {taxonomy_id}.html site page")
        source_field = source_field.strip()
        shape = TermShape.STRUCTURED if source_field in structured else TermShape.SCALAR
        definitions.append(TaxonomyDefinition(taxonomy_id, source_field, shape))
    return definitions


def validate_definitions(definitions: object) -> list[TaxonomyDefinition]:
    if isinstance(definitions, (str, bytes, Mapping)) or not isinstance(definitions, Iterable):
        raise ConfigError("Taxonomy definitions must be a sequence of TaxonomyDefinition")
    checked = []
    seen_ids = set()
    for definition in definitions:
        if not isinstance(definition, TaxonomyDefinition):
            raise ConfigError(f"Not a taxonomy definition: {definition!r}")
        if not definition.taxonomy_id or not definition.source_field:
            raise ConfigError(f"Incomplete taxonomy definition: {definition!r}")
        if not isinstance(definition.shape, TermShape):
            raise ConfigError(f"Unknown term shape for {definition.taxonomy_id!r}: {definition.shape!r}")
        if definition.taxonomy_id in seen_ids:
            raise ConfigError(f"Duplicate taxonomy id: {definition.taxonomy_id!r}")
        seen_ids.add(definition.taxonomy_id)
        checked.append(definition)
    return checked


def _structured_name(element: object) -> str:
    if isinstance(element, Mapping):
        name = element.get("name")
        if isinstance(name, str):
            return name.strip()
        return ""
    if isinstance(element, str):
        return element.strip()
    return ""


def _scalar_name(element: object) -> str:
    if isinstance(element, str):
        return element.strip()
    return ""


NAME_RESOLVERS = {
    TermShape.SCALAR: _scalar_name,
    TermShape.STRUCTURED: _structured_name,
}


def extract_terms(
    record: Mapping[str, Any], definition: TaxonomyDefinition, position: int | None = None
) -> list[str]:
    value = record.get(definition.source_field)
    if value is None:
        return []
    elements = value if isinstance(value, (list, tuple)) else [value]
    resolve = NAME_RESOLVERS[definition.shape]
    names = []
    for element in elements:
        name = resolve(element)
        if not name:
            logger.warning(
                "Skipping malformed %s term in record %s: %r",
                definition.taxonomy_id,
                record_label(record, position),
                element,
            )
            continue
        names.append(name)
    return names


def _fold_record(
    definition: TaxonomyDefinition,
    terms: dict[str, TermEntry],
    item: tuple[int, Mapping[str, Any]],
) -> dict[str, TermEntry]:
    position, record = item
    if not isinstance(record, Mapping):
        logger.warning("Skipping record #%d for %s: not an object", position, definition.taxonomy_id)
        return terms
    for name in extract_terms(record, definition, position):
        slug = slugify(name)
        if not slug:
            logger.warning(
                "Skipping %s term %r in record %s: it has no usable slug",
                definition.taxonomy_id,
                name,
                record_label(record, position),
            )
            continue
        entry = terms.get(slug)
        if entry is None:
            entry = TermEntry(slug=slug, display_name=name)
            terms[slug] = entry
        entry.add(record)
    return terms


def build_index(records: Sequence[Mapping[str, Any]], definitions: Iterable[TaxonomyDefinition]) -> TaxonomyIndex:
    definitions = validate_definitions(definitions)
    records = list(records)
    index = TaxonomyIndex()
    for definition in definitions:
        index.taxonomies[definition.taxonomy_id] = reduce(
            lambda terms, item: _fold_record(definition, terms, item),
            enumerate(records),
            {},
        )
        logger.info(
            "Collected %d %s terms from %d records",
            len(index.taxonomies[definition.taxonomy_id]),
            definition.taxonomy_id,
            len(records),
        )
    return index


def emit_plan(index: TaxonomyIndex) -> Iterator[PagePlanEntry]:
    for taxonomy_id, terms in index.taxonomies.items():
        for slug, entry in terms.items():
            yield PagePlanEntry(
                taxonomy_id=taxonomy_id,
                slug=slug,
                display_name=entry.display_name,
                members=tuple(entry.members),
            )
