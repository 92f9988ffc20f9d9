from __future__ import annotations

import logging
from typing import Any

from patent_odp.config import SETTINGS, Settings
from patent_odp.errors import ResolutionNotFoundError
from patent_odp.models import DocumentKind, PatentDocument, SearchPage, SearchRecord
from patent_odp.parser import parse
from patent_odp.resolver import SearchCapability, resolve_number, xml_location

LOGGER = logging.getLogger(__name__)


class ODPClient(SearchCapability):
    """Single-shot calls against the USPTO Open Data Portal.

    No retries or backoff happen here; callers wrap these methods with
    whatever policy they need.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.settings = Settings(
            odp_base_url=base_url or SETTINGS.odp_base_url,
            odp_api_key=api_key if api_key is not None else SETTINGS.odp_api_key,
            user_agent=user_agent or SETTINGS.user_agent,
            timeout=timeout if timeout is not None else SETTINGS.timeout,
        )

    def _headers(self, accept: str | None = "application/json") -> dict[str, str]:
        headers = {"User-Agent": self.settings.user_agent}
        if accept:
            headers["Accept"] = accept
        if self.settings.odp_api_key:
            headers["X-API-KEY"] = self.settings.odp_api_key
        return headers

    @staticmethod
    def parse_search_response(payload: dict) -> SearchPage:
        rows = payload.get("patentFileWrapperDataBag") or []
        records = []
        for row in rows:
            number = str(row.get("applicationNumberText") or "").strip() or None
            records.append(SearchRecord(application_number=number, raw=row))
        return SearchPage(results=tuple(records), count=int(payload.get("count") or len(records)))

    def search(self, query: str, offset: int, limit: int, timeout: float | None = None) -> SearchPage:
        import requests

        payload = {"q": query, "pagination": {"offset": offset, "limit": limit}}
        LOGGER.debug("POST %s q=%s offset=%s limit=%s", self.settings.search_url, query, offset, limit)
        try:
            response = requests.post(
                self.settings.search_url,
                json=payload,
                headers=self._headers(),
                timeout=timeout or self.settings.timeout,
            )
        except requests.Timeout as exc:
            raise TimeoutError(f"ODP search timed out: {query}") from exc
        response.raise_for_status()
        return self.parse_search_response(response.json())

    def get_patent(self, application_number: str, timeout: float | None = None) -> dict[str, Any]:
        import requests

        url = self.settings.application_url(application_number)
        LOGGER.debug("GET %s", url)
        response = requests.get(url, headers=self._headers(), timeout=timeout or self.settings.timeout)
        response.raise_for_status()
        rows = response.json().get("patentFileWrapperDataBag") or []
        if not rows:
            raise ResolutionNotFoundError(f"no patent data found for application {application_number}")
        return rows[0]

    def fetch_document(self, url: str, timeout: float | None = None) -> bytes:
        import requests

        LOGGER.debug("GET %s", url)
        response = requests.get(url, headers=self._headers(accept=None), timeout=timeout or self.settings.timeout)
        response.raise_for_status()
        return response.content

    def get_patent_xml(self, patent_number: str, timeout: float | None = None) -> PatentDocument:
        """Resolve any number format, then fetch and parse its full-text XML."""
        application_number = resolve_number(patent_number, self, timeout=timeout)
        url, kind = xml_location(self.get_patent(application_number, timeout=timeout))
        LOGGER.info("Fetching %s XML for application %s", kind.value, application_number)
        return parse(self.fetch_document(url, timeout=timeout), kind)

    def download_xml(self, url: str, expected_kind: DocumentKind | None = None) -> PatentDocument:
        return parse(self.fetch_document(url), expected_kind)
