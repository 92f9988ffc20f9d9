from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from patent_odp import extract
from patent_odp.errors import PatentODPError
from patent_odp.models import DocumentKind
from patent_odp.odp import ODPClient
from patent_odp.parser import parse
from patent_odp.patent_number import (
    format_as_application,
    format_as_grant,
    format_as_publication,
    normalize,
    to_application_number,
)
from patent_odp.resolver import resolve

LOGGER = logging.getLogger("patent_odp")
SECTIONS = ("title", "abstract", "description", "claims", "all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="patent_odp")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    norm = sub.add_parser("normalize", help="Classify and normalize a patent number")
    norm.add_argument("number")

    res = sub.add_parser("resolve", help="Resolve a grant/publication number to its application number")
    res.add_argument("number")
    res.add_argument("--timeout", type=float, default=None)

    ext = sub.add_parser("extract", help="Extract plain text from a grant/application XML file")
    ext.add_argument("path", type=Path)
    ext.add_argument("--kind", choices=[k.value for k in DocumentKind], default=None)
    ext.add_argument("--section", choices=SECTIONS, default="all")
    return parser


def _normalize_command(number: str) -> dict:
    pn = normalize(number)
    return {
        "original": pn.original,
        "normalized": pn.normalized,
        "kind": pn.kind.value,
        "country": pn.country,
        "application_number": to_application_number(pn),
        "formatted": {
            "application": format_as_application(pn),
            "grant": format_as_grant(pn),
            "publication": format_as_publication(pn),
        },
    }


def _extract_command(path: Path, kind: str | None, section: str) -> str:
    doc = parse(path.read_bytes(), DocumentKind(kind) if kind else None)
    claims = extract.document_claims(doc)
    if section == "title":
        return extract.title(doc)
    if section == "abstract":
        return extract.abstract_text(doc)
    if section == "description":
        return extract.description_text(doc)
    if section == "claims":
        return extract.all_claims_text_formatted(claims)
    return json.dumps(
        {
            "kind": doc.kind.value,
            "title": extract.title(doc),
            "abstract": extract.abstract_text(doc),
            "description": extract.description_text(doc),
            "claims": extract.all_claims_text(claims),
        },
        indent=2,
        ensure_ascii=False,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "normalize":
            print(json.dumps(_normalize_command(args.number), indent=2))
        elif args.command == "resolve":
            pn = normalize(args.number)
            print(resolve(pn, ODPClient(), timeout=args.timeout))
        elif args.command == "extract":
            print(_extract_command(args.path, args.kind, args.section))
    except PatentODPError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
