from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Protocol

from patent_odp.errors import (
    MalformedResponseError,
    ResolutionCancelledError,
    ResolutionError,
    ResolutionNotFoundError,
    SearchFailedError,
)
from patent_odp.models import DocumentKind, PatentNumber, PatentNumberKind, SearchPage
from patent_odp.patent_number import normalize, to_application_number

LOGGER = logging.getLogger(__name__)

GRANT_FIELD = "applicationMetaData.patentNumber"
PUBLICATION_FIELD = "applicationMetaData.earliestPublicationNumber"

# Metadata blocks carrying a fileLocationURI, in lookup order.
XML_LOCATION_KEYS: tuple[tuple[str, DocumentKind], ...] = (
    ("grantDocumentMetaData", DocumentKind.GRANT),
    ("applicationMetaData", DocumentKind.APPLICATION),
    ("pgpubDocumentMetaData", DocumentKind.APPLICATION),
)


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class SearchCapability(ABC):
    @abstractmethod
    def search(self, query: str, offset: int, limit: int, timeout: float | None = None) -> SearchPage:
        raise NotImplementedError


def publication_query_value(normalized: str) -> str:
    # 20250087686 -> US20250087686A1
    if len(normalized) == 11 and not normalized.startswith("US"):
        return f"US{normalized}A1"
    return normalized


def build_query(pn: PatentNumber) -> str:
    if pn.kind is PatentNumberKind.GRANT:
        return f"{GRANT_FIELD}:{pn.normalized}"
    if pn.kind is PatentNumberKind.PUBLICATION:
        return f"{PUBLICATION_FIELD}:{publication_query_value(pn.normalized)}"
    raise ResolutionError(f"no search query for {pn.kind.value} number {pn.normalized}")


def _check_cancelled(cancel: CancelToken | None, pn: PatentNumber) -> None:
    if cancel is not None and cancel.is_set():
        raise ResolutionCancelledError(f"resolution of {pn.kind.value} number {pn.normalized} was cancelled")


def resolve(
    pn: PatentNumber,
    search: SearchCapability,
    *,
    timeout: float | None = None,
    cancel: CancelToken | None = None,
) -> str:
    """Return the application number behind ``pn``.

    Application numbers are returned without touching ``search``; grant and
    publication numbers cost exactly one search request for a single record.
    Nothing is retried here.
    """
    if pn.kind is PatentNumberKind.APPLICATION:
        return to_application_number(pn)
    if pn.kind is PatentNumberKind.UNKNOWN:
        raise ResolutionError(f"unknown patent number type: {pn.original!r}")

    query = build_query(pn)
    _check_cancelled(cancel, pn)
    LOGGER.debug("Resolving %s with query %s", pn, query)
    try:
        page = search.search(query, 0, 1, timeout=timeout)
    except TimeoutError as exc:
        raise ResolutionCancelledError(f"search for {pn.kind.value} number {pn.normalized} timed out") from exc
    except Exception as exc:  # noqa: BLE001
        raise SearchFailedError(f"failed to search for {pn.kind.value} number {pn.normalized}: {exc}") from exc
    _check_cancelled(cancel, pn)

    if not page.results:
        raise ResolutionNotFoundError(f"no application found for {pn.kind.value} number {pn.normalized}")
    application_number = page.results[0].application_number
    if not application_number:
        raise MalformedResponseError(
            f"application number not found in response for {pn.kind.value} number {pn.normalized}"
        )
    LOGGER.info("Resolved %s to application %s", pn, application_number)
    return application_number


def complete(
    pn: PatentNumber,
    search: SearchCapability,
    *,
    timeout: float | None = None,
    cancel: CancelToken | None = None,
) -> PatentNumber:
    application_number = resolve(pn, search, timeout=timeout, cancel=cancel)
    return dataclasses.replace(pn, application_number=application_number)


def resolve_number(
    value: str,
    search: SearchCapability,
    *,
    timeout: float | None = None,
    cancel: CancelToken | None = None,
) -> str:
    return resolve(normalize(value), search, timeout=timeout, cancel=cancel)


def xml_location(record: Mapping[str, Any]) -> tuple[str, DocumentKind]:
    """Pick the full-text XML URL of a patent data record, grant text first."""
    for key, kind in XML_LOCATION_KEYS:
        meta = record.get(key)
        if not isinstance(meta, Mapping):
            continue
        uri = str(meta.get("fileLocationURI") or "").strip()
        if uri:
            return uri, kind
    raise MalformedResponseError("no XML URL found in patent data")
