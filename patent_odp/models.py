from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class PatentNumberKind(str, Enum):
    UNKNOWN = "unknown"
    APPLICATION = "application"
    GRANT = "grant"
    PUBLICATION = "publication"


@dataclass(frozen=True)
class PatentNumber:
    original: str
    normalized: str
    kind: PatentNumberKind
    application_number: str | None = None
    country: str = "US"

    def __str__(self) -> str:
        return f"{self.original} ({self.kind.value}: {self.normalized})"


@dataclass(frozen=True)
class SearchRecord:
    application_number: str | None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchPage:
    results: tuple[SearchRecord, ...] = ()
    count: int = 0


class DocumentKind(str, Enum):
    GRANT = "grant"
    APPLICATION = "application"

    @property
    def root_tag(self) -> str:
        return f"us-patent-{self.value}"


class InlineStyle(str, Enum):
    SUB = "sub"
    SUP = "sup"
    ITALIC = "i"
    BOLD = "b"


@dataclass(frozen=True)
class FormattingSpan:
    style: InlineStyle
    text: str


@dataclass(frozen=True)
class DocumentId:
    country: str | None = None
    doc_number: str | None = None
    kind: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class Title:
    text: str
    id: str | None = None
    lang: str | None = None


@dataclass(frozen=True)
class Bibliography:
    publication_reference: DocumentId | None = None
    application_reference: DocumentId | None = None
    invention_titles: tuple[Title, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    text: str
    id: str | None = None
    num: str | None = None
    spans: tuple[FormattingSpan, ...] = ()


@dataclass(frozen=True)
class Abstract:
    id: str | None = None
    lang: str | None = None
    paragraphs: tuple[Paragraph, ...] = ()


@dataclass(frozen=True)
class Heading:
    text: str
    id: str | None = None
    level: str | None = None


@dataclass(frozen=True)
class Description:
    id: str | None = None
    lang: str | None = None
    headings: tuple[Heading, ...] = ()
    paragraphs: tuple[Paragraph, ...] = ()


@dataclass(frozen=True)
class Image:
    id: str | None = None
    he: str | None = None
    wi: str | None = None
    file: str | None = None
    alt: str | None = None
    img_content: str | None = None
    img_format: str | None = None


@dataclass(frozen=True)
class Figure:
    id: str | None = None
    image: Image | None = None


@dataclass(frozen=True)
class Drawings:
    id: str | None = None
    figures: tuple[Figure, ...] = ()


@dataclass(frozen=True)
class ClaimText:
    """One ``claim-text`` block: its own text plus nested dependent blocks in document order."""

    text: str
    id: str | None = None
    nested: tuple[ClaimText, ...] = ()
    spans: tuple[FormattingSpan, ...] = ()


@dataclass(frozen=True)
class Claim:
    id: str | None = None
    num: str | None = None
    text_nodes: tuple[ClaimText, ...] = ()


@dataclass(frozen=True)
class Claims:
    id: str | None = None
    lang: str | None = None
    claims: tuple[Claim, ...] = ()


@dataclass(frozen=True)
class PatentDocument:
    """Common shape of both ICE DTD grammars.

    Only the two subclasses are ever instantiated by the parser, so a parsed
    document is always exactly one of grant or application.
    """

    kind: ClassVar[DocumentKind]

    lang: str | None = None
    dtd_version: str | None = None
    file: str | None = None
    status: str | None = None
    id: str | None = None
    country: str | None = None
    date_produced: str | None = None
    date_publ: str | None = None
    bibliography: Bibliography | None = None
    abstract: Abstract | None = None
    description: Description | None = None
    claims: Claims | None = None
    drawings: Drawings | None = None

    def __post_init__(self) -> None:
        if type(self) is PatentDocument:
            raise TypeError("PatentDocument is abstract; use PatentGrant or PatentApplication")


@dataclass(frozen=True)
class PatentGrant(PatentDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.GRANT


@dataclass(frozen=True)
class PatentApplication(PatentDocument):
    kind: ClassVar[DocumentKind] = DocumentKind.APPLICATION
