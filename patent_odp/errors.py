from __future__ import annotations


class PatentODPError(Exception):
    """Base class for every error raised by patent_odp."""


class InvalidFormatError(PatentODPError, ValueError):
    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"{reason}: {value!r}")
        self.value = value
        self.reason = reason


class ResolutionError(PatentODPError):
    """A patent number could not be resolved to an application number."""


class ResolutionNotFoundError(ResolutionError):
    pass


class MalformedResponseError(ResolutionError):
    pass


class ResolutionCancelledError(ResolutionError):
    pass


class SearchFailedError(ResolutionError):
    pass


class ParseError(PatentODPError):
    """Raw bytes could not be decoded into a patent document."""


class MalformedXMLError(ParseError):
    pass


class DocumentTypeMismatchError(ParseError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"expected {expected} root element, got {actual}")
        self.expected = expected
        self.actual = actual


class UnrecognizedDocumentTypeError(ParseError):
    pass
