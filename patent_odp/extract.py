"""Plain-text views over a parsed patent document.

Every function here is total: a missing section yields ``""`` or an empty
list. Inline formatting spans (sub, sup, i, b) never contribute characters.
"""

from __future__ import annotations

import re
from typing import Iterable

from patent_odp.models import Claim, Claims, ClaimText, PatentDocument

LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def _join_blocks(pieces: Iterable[str]) -> str:
    out = ""
    for piece in pieces:
        if out:
            out += "\n\n"
        out += piece
    return out.strip()


def title(doc: PatentDocument) -> str:
    bib = doc.bibliography
    if bib is None or not bib.invention_titles:
        return ""
    return bib.invention_titles[0].text.strip()


def abstract_text(doc: PatentDocument) -> str:
    if doc.abstract is None:
        return ""
    return "\n\n".join(p.text.strip() for p in doc.abstract.paragraphs).strip()


def description_text(doc: PatentDocument) -> str:
    # Headings come out as one block ahead of all paragraphs; the source
    # interleaving of headings and paragraphs is not kept.
    desc = doc.description
    if desc is None:
        return ""
    headings = (h.text.strip() for h in desc.headings)
    paragraphs = (p.text.strip() for p in desc.paragraphs)
    return _join_blocks([*headings, *paragraphs])


def _walk(nodes: tuple[ClaimText, ...]) -> Iterable[ClaimText]:
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.nested))


def claim_text(claim: Claim | None) -> str:
    if claim is None:
        return ""
    fragments = (node.text.strip() for node in _walk(claim.text_nodes))
    return " ".join(f for f in fragments if f)


def document_claims(doc: PatentDocument) -> tuple[Claim, ...]:
    if doc.claims is None:
        return ()
    return doc.claims.claims


def _claim_list(claims: Claims | Iterable[Claim] | None) -> list[Claim]:
    if claims is None:
        return []
    if isinstance(claims, Claims):
        return list(claims.claims)
    return list(claims)


def all_claims_text(claims: Claims | Iterable[Claim] | None) -> list[str]:
    texts = (claim_text(c) for c in _claim_list(claims))
    return [t for t in texts if t]


def claim_number(claim: Claim, position: int) -> int:
    """Declared ``num`` of a claim ("00003" -> 3), or its 1-based ``position``."""
    match = LEADING_INT_RE.match(claim.num or "")
    if match is None:
        return position
    return int(match.group(1))


def all_claims_text_formatted(claims: Claims | Iterable[Claim] | None) -> str:
    blocks = [
        f"CLAIM {claim_number(claim, idx)}:\n{claim_text(claim)}"
        for idx, claim in enumerate(_claim_list(claims), start=1)
    ]
    return "\n\n".join(blocks)
