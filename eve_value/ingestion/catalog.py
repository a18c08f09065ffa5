"""Loaders for the user-maintained pack (offer) and Omega plan documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, TypeVar

from eve_value.errors import FetchError, ParseError
from eve_value.ingestion.http_client import JsonHttpClient
from eve_value.ingestion.models import Offer, Plan
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)

RecordT = TypeVar("RecordT")


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def load_document(source: str | Path, client: JsonHttpClient | None = None) -> object:
    """Return the decoded JSON document at ``source`` (a URL or a local path)."""

    if _is_url(source):
        if client is None:
            raise ValueError("client is required for remote documents")
        return client.get_json(str(source)).payload

    path = Path(source)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"unable to read {path}: {exc}", url=str(path)) from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path} is not UTF-8 encoded JSON: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{path} is not valid JSON: {exc}") from exc


def _load_records(
    source: str | Path,
    factory: Callable[[object, int], RecordT],
    client: JsonHttpClient | None,
    label: str,
) -> tuple[RecordT, ...]:
    document = load_document(source, client)
    if not isinstance(document, list):
        raise ParseError(f"{label} document {source} must be a JSON array")
    records = tuple(factory(item, index) for index, item in enumerate(document))
    LOGGER.info("Loaded %s %s from %s", len(records), label, source)
    return records


def load_offers(source: str | Path, client: JsonHttpClient | None = None) -> tuple[Offer, ...]:
    """Load cash packs; malformed entries are kept so valuation can flag them."""

    return _load_records(source, Offer.from_record, client, "offers")


def load_plans(source: str | Path, client: JsonHttpClient | None = None) -> tuple[Plan, ...]:
    return _load_records(source, Plan.from_record, client, "plans")


__all__ = ["load_document", "load_offers", "load_plans"]
