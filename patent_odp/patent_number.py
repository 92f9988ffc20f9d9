"""Normalization of human-entered USPTO patent numbers.

Accepted formats:

- Application: ``17248024``, ``17/248,024``, ``17/248024``, ``US 17/248,024``
- Grant: ``9123456``, ``11,646,472``, ``US 11,646,472 B2``, ``11646472 B2``
- Publication: ``20250087686``, ``US20250087686A1``, ``US 2025/0087686 A1``
"""

from __future__ import annotations

import re

from patent_odp.errors import InvalidFormatError
from patent_odp.models import PatentNumber, PatentNumberKind

GRANT_WITH_KIND_RE = re.compile(r"(?:US)?\s*(\d{1,2})[,\s]*(\d{3})[,\s]*(\d{3})\s+[A-Z]\d", re.ASCII)
APPLICATION_WITH_SLASH_RE = re.compile(r"(?:US)?\s*(\d{2})/(\d{3})[,\s]*(\d{3})", re.ASCII)
GRANT_WITH_COMMA_RE = re.compile(r"(?:US)?\s*(\d{1,2}),(\d{3}),(\d{3})", re.ASCII)
PUBLICATION_RE = re.compile(r"(?:US)?\s*(\d{4})[/,\s]*(\d{7})(?:\s*[A-Z]\d)?", re.ASCII)
DIGITS_RE = re.compile(r"\d+", re.ASCII)

# Most specific first; the first full match wins.
_PATTERNS: tuple[tuple[re.Pattern[str], PatentNumberKind], ...] = (
    (GRANT_WITH_KIND_RE, PatentNumberKind.GRANT),
    (APPLICATION_WITH_SLASH_RE, PatentNumberKind.APPLICATION),
    (GRANT_WITH_COMMA_RE, PatentNumberKind.GRANT),
    (PUBLICATION_RE, PatentNumberKind.PUBLICATION),
)

_KIND_BY_LENGTH = {
    7: PatentNumberKind.GRANT,
    # 8 digits could be a recent grant as well; without commas or a kind code
    # it is treated as an application, which the lookup API accepts either way.
    8: PatentNumberKind.APPLICATION,
    9: PatentNumberKind.APPLICATION,
    11: PatentNumberKind.PUBLICATION,
}


def _build(original: str, digits: str, kind: PatentNumberKind) -> PatentNumber:
    application_number = digits if kind is PatentNumberKind.APPLICATION else None
    return PatentNumber(original=original, normalized=digits, kind=kind, application_number=application_number)


def normalize(value: str) -> PatentNumber:
    """Classify ``value`` and reduce it to its canonical digits.

    Raises :class:`InvalidFormatError` when the input is empty, has an
    unsupported digit count, or matches none of the known formats.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidFormatError(value, "empty")

    for pattern, kind in _PATTERNS:
        match = pattern.fullmatch(cleaned)
        if match:
            return _build(value, "".join(match.groups()), kind)

    if DIGITS_RE.fullmatch(cleaned):
        kind = _KIND_BY_LENGTH.get(len(cleaned))
        if kind is None:
            raise InvalidFormatError(value, "invalid length")
        return _build(value, cleaned, kind)

    raise InvalidFormatError(value, "unrecognized format")


def to_application_number(pn: PatentNumber) -> str:
    # Grant and publication digits are accepted by the lookup API as they are.
    return pn.application_number or pn.normalized


def format_as_application(pn: PatentNumber) -> str:
    digits = pn.normalized
    if pn.kind is not PatentNumberKind.APPLICATION or len(digits) < 8:
        return digits
    return f"{digits[:2]}/{digits[2:5]},{digits[5:]}"


def format_as_grant(pn: PatentNumber) -> str:
    digits = pn.normalized
    if pn.kind is not PatentNumberKind.GRANT:
        return digits
    if len(digits) == 7:
        return f"{digits[:1]},{digits[1:4]},{digits[4:]}"
    if len(digits) == 8:
        return f"{digits[:2]},{digits[2:5]},{digits[5:]}"
    return digits


def format_as_publication(pn: PatentNumber) -> str:
    digits = pn.normalized
    if pn.kind is not PatentNumberKind.PUBLICATION or len(digits) != 11:
        return digits
    return f"{digits[:4]}/{digits[4:]}"
