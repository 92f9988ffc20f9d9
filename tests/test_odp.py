from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests

from patent_odp.errors import DocumentTypeMismatchError, ResolutionCancelledError, ResolutionNotFoundError
from patent_odp.models import DocumentKind, PatentApplication, PatentGrant
from patent_odp.odp import ODPClient
from patent_odp.patent_number import normalize
from patent_odp.resolver import resolve

FIXTURES = Path(__file__).parent / "fixtures"
SEARCH_PAYLOAD = json.loads((FIXTURES / "odp_search_response.json").read_text())
GRANT_URL = SEARCH_PAYLOAD["patentFileWrapperDataBag"][0]["grantDocumentMetaData"]["fileLocationURI"]


class _FakeResponse:
    def __init__(self, payload: Any = None, content: bytes = b"", status: int = 200) -> None:
        self._payload = payload
        self.content = content
        self.status_code = status

    def json(self) -> Any:
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")


def _client() -> ODPClient:
    return ODPClient(base_url="https://odp.example", api_key="secret", user_agent="test-agent", timeout=7)


def test_parse_search_response() -> None:
    page = ODPClient.parse_search_response(SEARCH_PAYLOAD)
    assert page.count == 1
    assert page.results[0].application_number == "17123456"
    assert page.results[0].raw["applicationMetaData"]["patentNumber"] == "11696966"


def test_parse_search_response_blank_number() -> None:
    page = ODPClient.parse_search_response({"patentFileWrapperDataBag": [{"applicationNumberText": " "}]})
    assert page.results[0].application_number is None
    assert ODPClient.parse_search_response({}).results == ()


def test_search_posts_query(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def fake_post(url: str, **kwargs: Any) -> _FakeResponse:
        calls.append({"url": url, **kwargs})
        return _FakeResponse(SEARCH_PAYLOAD)

    monkeypatch.setattr(requests, "post", fake_post)
    number = resolve(normalize("11,696,966"), _client())

    assert number == "17123456"
    assert calls[0]["url"] == "https://odp.example/api/v1/patent/applications/search"
    assert calls[0]["json"] == {
        "q": "applicationMetaData.patentNumber:11696966",
        "pagination": {"offset": 0, "limit": 1},
    }
    assert calls[0]["headers"]["X-API-KEY"] == "secret"
    assert calls[0]["headers"]["User-Agent"] == "test-agent"
    assert calls[0]["timeout"] == 7


def test_search_timeout_is_cancellation(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(url: str, **kwargs: Any) -> _FakeResponse:
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(requests, "post", fake_post)
    with pytest.raises(ResolutionCancelledError):
        resolve(normalize("11,696,966"), _client(), timeout=0.5)


def test_get_patent_xml(monkeypatch: pytest.MonkeyPatch) -> None:
    grant_xml = (FIXTURES / "sample_grant.xml").read_bytes()
    fetched: list[str] = []

    def fake_post(url: str, **kwargs: Any) -> _FakeResponse:
        return _FakeResponse(SEARCH_PAYLOAD)

    def fake_get(url: str, **kwargs: Any) -> _FakeResponse:
        fetched.append(url)
        if url == GRANT_URL:
            return _FakeResponse(content=grant_xml)
        return _FakeResponse(SEARCH_PAYLOAD)

    monkeypatch.setattr(requests, "post", fake_post)
    monkeypatch.setattr(requests, "get", fake_get)
    doc = _client().get_patent_xml("US 11,696,966 B2")

    assert isinstance(doc, PatentGrant)
    assert fetched == ["https://odp.example/api/v1/patent/applications/17123456", GRANT_URL]


def test_get_patent_without_data(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(requests, "get", lambda url, **kwargs: _FakeResponse({"count": 0}))
    with pytest.raises(ResolutionNotFoundError):
        _client().get_patent("17123456")


def test_fetch_document_raises_on_http_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(requests, "get", lambda url, **kwargs: _FakeResponse(status=404))
    with pytest.raises(requests.HTTPError):
        _client().fetch_document("https://odp.example/missing.xml")


@pytest.mark.parametrize(
    ("fixture", "expected_kind", "doc_type"),
    [
        ("sample_grant.xml", None, PatentGrant),
        ("sample_application.xml", None, PatentApplication),
        ("sample_application.xml", DocumentKind.APPLICATION, PatentApplication),
    ],
)
def test_download_xml(
    monkeypatch: pytest.MonkeyPatch, fixture: str, expected_kind: DocumentKind | None, doc_type: type
) -> None:
    content = (FIXTURES / fixture).read_bytes()
    calls: list[dict[str, Any]] = []

    def fake_get(url: str, **kwargs: Any) -> _FakeResponse:
        calls.append({"url": url, **kwargs})
        return _FakeResponse(content=content)

    monkeypatch.setattr(requests, "get", fake_get)
    doc = _client().download_xml("https://odp.example/doc.xml", expected_kind)

    assert isinstance(doc, doc_type)
    assert calls[0]["url"] == "https://odp.example/doc.xml"
    assert calls[0]["headers"] == {"User-Agent": "test-agent", "X-API-KEY": "secret"}


def test_download_xml_wrong_kind(monkeypatch: pytest.MonkeyPatch) -> None:
    content = (FIXTURES / "sample_application.xml").read_bytes()
    monkeypatch.setattr(requests, "get", lambda url, **kwargs: _FakeResponse(content=content))
    with pytest.raises(DocumentTypeMismatchError):
        _client().download_xml("https://odp.example/doc.xml", DocumentKind.GRANT)
