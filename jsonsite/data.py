from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import requests

from .errors import DataError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> Any:
    if session is None:
        with requests.Session() as owned:
            return fetch_json(url, timeout=timeout, session=owned)
    logger.info("Fetching data from %s", url)
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as exc:
        raise DataError(f"Could not fetch {url}: {exc}") from exc
    except ValueError as exc:
        raise DataError(f"Invalid JSON from {url}: {exc}") from exc
    logger.info("Fetched data from %s", url)
    return payload


def read_json(path: Path) -> Any:
    if not path.exists():
        raise DataError(f"Data file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise DataError(f"Data file {path} is not UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DataError(f"Invalid JSON in data file {path}: {exc}") from exc


def coerce_records(payload: Any) -> list[dict]:
    """Normalize a decoded JSON root into a list of record mappings."""
    if payload is None:
        return []
    if isinstance(payload, Mapping):
        return [dict(payload)]
    if not isinstance(payload, list):
        raise DataError(f"Data must be a JSON array or object, got {type(payload).__name__}")
    records = []
    for position, item in enumerate(payload):
        if not isinstance(item, Mapping):
            logger.warning("Skipping record #%d: expected an object, got %r", position, item)
            continue
        records.append(dict(item))
    return records


def resolve_source(value: object) -> str:
    """Pick the data source from config; only the first entry of a list is used."""
    if isinstance(value, (list, tuple)):
        if len(value) > 1:
            logger.warning("Multiple data sources configured; only %s is used", value[0])
        value = value[0] if value else ""
    source = str(value or "").strip()
    if not source:
        raise DataError("No data source specified")
    return source


def load_records(
    source: str,
    base_dir: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> list[dict]:
    if is_url(source):
        payload = fetch_json(source, timeout=timeout, session=session)
    else:
        path = Path(source)
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        payload = read_json(path)
    records = coerce_records(payload)
    logger.info("Loaded %d records from %s", len(records), source)
    return records
