from __future__ import annotations

import logging

from lxml import etree

from patent_odp.errors import DocumentTypeMismatchError, MalformedXMLError, UnrecognizedDocumentTypeError
from patent_odp.models import (
    Abstract,
    Bibliography,
    Claim,
    Claims,
    ClaimText,
    Description,
    DocumentId,
    DocumentKind,
    Drawings,
    Figure,
    FormattingSpan,
    Heading,
    Image,
    InlineStyle,
    Paragraph,
    PatentApplication,
    PatentDocument,
    PatentGrant,
    Title,
)

LOGGER = logging.getLogger(__name__)

# Grant is tried first when no kind is given.
DETECTION_ORDER = (DocumentKind.GRANT, DocumentKind.APPLICATION)

DOCUMENT_CLASSES: dict[DocumentKind, type[PatentDocument]] = {
    DocumentKind.GRANT: PatentGrant,
    DocumentKind.APPLICATION: PatentApplication,
}

BIBLIOGRAPHY_TAGS = {
    DocumentKind.GRANT: "us-bibliographic-data-grant",
    DocumentKind.APPLICATION: "us-bibliographic-data-application",
}

INLINE_TAGS = {style.value: style for style in InlineStyle}


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        remove_comments=True,
        remove_pis=True,
        huge_tree=True,
    )


def _localname(node: etree._Element) -> str:
    return etree.QName(node).localname


def _children(node: etree._Element, tag: str) -> list[etree._Element]:
    return [child for child in node if isinstance(child.tag, str) and _localname(child) == tag]


def _child(node: etree._Element | None, tag: str) -> etree._Element | None:
    if node is None:
        return None
    for child in node:
        if isinstance(child.tag, str) and _localname(child) == tag:
            return child
    return None


def _own_text(node: etree._Element) -> str:
    """Character data of ``node`` itself, leaving out the content of child elements."""
    parts = [node.text or ""]
    parts.extend(child.tail or "" for child in node)
    return "".join(parts)


def _child_text(node: etree._Element | None, tag: str) -> str | None:
    child = _child(node, tag)
    if child is None:
        return None
    return _own_text(child)


def _spans(node: etree._Element) -> tuple[FormattingSpan, ...]:
    spans: list[FormattingSpan] = []
    for child in node:
        if not isinstance(child.tag, str):
            continue
        style = INLINE_TAGS.get(_localname(child))
        if style is not None:
            spans.append(FormattingSpan(style=style, text=_own_text(child)))
    return tuple(spans)


def _document_id(node: etree._Element | None) -> DocumentId | None:
    if node is None:
        return None
    return DocumentId(
        country=_child_text(node, "country"),
        doc_number=_child_text(node, "doc-number"),
        kind=_child_text(node, "kind"),
        date=_child_text(node, "date"),
    )


def _bibliography(node: etree._Element | None) -> Bibliography | None:
    if node is None:
        return None
    titles = tuple(
        Title(text=_own_text(t), id=t.get("id"), lang=t.get("lang")) for t in _children(node, "invention-title")
    )
    return Bibliography(
        publication_reference=_document_id(_child(_child(node, "publication-reference"), "document-id")),
        application_reference=_document_id(_child(_child(node, "application-reference"), "document-id")),
        invention_titles=titles,
    )


def _paragraph(node: etree._Element) -> Paragraph:
    return Paragraph(text=_own_text(node), id=node.get("id"), num=node.get("num"), spans=_spans(node))


def _abstract(node: etree._Element | None) -> Abstract | None:
    if node is None:
        return None
    return Abstract(
        id=node.get("id"),
        lang=node.get("lang"),
        paragraphs=tuple(_paragraph(p) for p in _children(node, "p")),
    )


def _description(node: etree._Element | None) -> Description | None:
    if node is None:
        return None
    return Description(
        id=node.get("id"),
        lang=node.get("lang"),
        headings=tuple(
            Heading(text=_own_text(h), id=h.get("id"), level=h.get("level")) for h in _children(node, "heading")
        ),
        paragraphs=tuple(_paragraph(p) for p in _children(node, "p")),
    )


def _image(node: etree._Element | None) -> Image | None:
    if node is None:
        return None
    return Image(
        id=node.get("id"),
        he=node.get("he"),
        wi=node.get("wi"),
        file=node.get("file"),
        alt=node.get("alt"),
        img_content=node.get("img-content"),
        img_format=node.get("img-format"),
    )


def _drawings(node: etree._Element | None) -> Drawings | None:
    if node is None:
        return None
    figures = tuple(Figure(id=f.get("id"), image=_image(_child(f, "img"))) for f in _children(node, "figure"))
    return Drawings(id=node.get("id"), figures=figures)


def _claim_texts(node: etree._Element) -> tuple[ClaimText, ...]:
    """Build the ``claim-text`` forest under ``node`` bottom-up with an explicit stack."""
    built: dict[etree._Element, ClaimText] = {}
    stack: list[tuple[etree._Element, bool]] = [(el, False) for el in reversed(_children(node, "claim-text"))]
    while stack:
        element, expanded = stack.pop()
        nested = _children(element, "claim-text")
        if not expanded:
            stack.append((element, True))
            stack.extend((el, False) for el in reversed(nested))
            continue
        built[element] = ClaimText(
            text=_own_text(element),
            id=element.get("id"),
            nested=tuple(built.pop(el) for el in nested),
            spans=_spans(element),
        )
    return tuple(built.pop(el) for el in _children(node, "claim-text"))


def _claims(node: etree._Element | None) -> Claims | None:
    if node is None:
        return None
    claims = tuple(
        Claim(id=c.get("id"), num=c.get("num"), text_nodes=_claim_texts(c)) for c in _children(node, "claim")
    )
    return Claims(id=node.get("id"), lang=node.get("lang"), claims=claims)


def _build_document(root: etree._Element, kind: DocumentKind) -> PatentDocument:
    return DOCUMENT_CLASSES[kind](
        lang=root.get("lang"),
        dtd_version=root.get("dtd-version"),
        file=root.get("file"),
        status=root.get("status"),
        id=root.get("id"),
        country=root.get("country"),
        date_produced=root.get("date-produced"),
        date_publ=root.get("date-publ"),
        bibliography=_bibliography(_child(root, BIBLIOGRAPHY_TAGS[kind])),
        abstract=_abstract(_child(root, "abstract")),
        description=_description(_child(root, "description")),
        claims=_claims(_child(root, "claims")),
        drawings=_drawings(_child(root, "drawings")),
    )


def _read_root(data: bytes) -> etree._Element:
    if not data or not data.strip():
        raise MalformedXMLError("empty document")
    try:
        return etree.fromstring(data, parser=_make_parser())
    except etree.XMLSyntaxError as exc:
        raise MalformedXMLError(f"malformed XML: {exc}") from exc


def parse(data: bytes, expected_kind: DocumentKind | None = None) -> PatentDocument:
    """Decode a ``us-patent-grant`` or ``us-patent-application`` XML document.

    With ``expected_kind`` the root element must belong to that grammar;
    without it the grant grammar is tried before the application grammar.
    """
    if expected_kind is not None:
        root = _read_root(data)
        actual = _localname(root)
        if actual != expected_kind.root_tag:
            raise DocumentTypeMismatchError(expected_kind.root_tag, actual)
        return _build_document(root, expected_kind)

    try:
        root = _read_root(data)
    except MalformedXMLError as exc:
        if not data or not data.strip():
            raise
        raise UnrecognizedDocumentTypeError(f"unrecognized XML document type: {exc}") from exc

    actual = _localname(root)
    for kind in DETECTION_ORDER:
        if actual == kind.root_tag:
            LOGGER.debug("Detected %s document (dtd-version %s)", kind.value, root.get("dtd-version"))
            return _build_document(root, kind)
    raise UnrecognizedDocumentTypeError(
        f"unrecognized XML document type {actual!r} (expected us-patent-grant or us-patent-application)"
    )


def parse_grant(data: bytes) -> PatentGrant:
    return parse(data, DocumentKind.GRANT)  # type: ignore[return-value]


def parse_application(data: bytes) -> PatentApplication:
    return parse(data, DocumentKind.APPLICATION)  # type: ignore[return-value]
