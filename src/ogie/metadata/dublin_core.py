"""
Dublin Core parser.

Reads ``dc.*`` and ``dcterms.*`` from meta ``name``/``property`` and link
``rel`` attributes. DCTERMS refinements fold into their DC element; the
multi-valued elements collect every value, the rest keep the first one.
"""

from __future__ import annotations

import re
from dataclasses import fields
from typing import Dict, List, Optional, Tuple

from ogie.metadata.models import DublinCoreData
from ogie.metadata.utils import Document, attr, single_or_list

_DC_PREFIX = re.compile(r"^(?:dc|dcterms)\.(.+)$", re.IGNORECASE)

DC_FIELDS = frozenset(f.name for f in fields(DublinCoreData))
MULTI_VALUE_FIELDS: Tuple[str, ...] = ("contributor", "creator", "identifier", "relation", "subject")

DCTERMS_TO_DC: Dict[str, str] = {
    "abstract": "description",
    "accessrights": "rights",
    "alternative": "title",
    "available": "date",
    "bibliographiccitation": "identifier",
    "conformsto": "relation",
    "created": "date",
    "dateaccepted": "date",
    "datecopyrighted": "date",
    "datesubmitted": "date",
    "extent": "format",
    "hasformat": "relation",
    "haspart": "relation",
    "hasversion": "relation",
    "isformatof": "relation",
    "ispartof": "relation",
    "isreferencedby": "relation",
    "isreplacedby": "relation",
    "isrequiredby": "relation",
    "issued": "date",
    "isversionof": "relation",
    "license": "rights",
    "medium": "format",
    "modified": "date",
    "provenance": "source",
    "references": "relation",
    "replaces": "relation",
    "requires": "relation",
    "spatial": "coverage",
    "tableofcontents": "description",
    "temporal": "coverage",
    "valid": "date",
}


def _normalize_field(name: str) -> Optional[str]:
    mapped = DCTERMS_TO_DC.get(name, name)
    return mapped if mapped in DC_FIELDS else None


def _dc_tags(doc: Document) -> List[Tuple[str, str]]:
    tags: List[Tuple[str, str]] = []
    for meta in doc.find_all("meta"):
        key = attr(meta, "name") or attr(meta, "property")
        content = attr(meta, "content")
        match = _DC_PREFIX.match(key) if key else None
        if match and content:
            tags.append((match.group(1).lower(), content))
    for link in doc.find_all("link"):
        rel = attr(link, "rel")
        href = attr(link, "href")
        match = _DC_PREFIX.match(rel) if rel else None
        if match and href:
            tags.append((match.group(1).lower(), href))
    return tags


class DublinCoreParser:
    """Parser for Dublin Core metadata."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> DublinCoreData:
        result = DublinCoreData()
        multi: Dict[str, List[str]] = {}

        for raw_field, value in _dc_tags(doc):
            name = _normalize_field(raw_field)
            if name is None:
                continue
            if name in MULTI_VALUE_FIELDS:
                multi.setdefault(name, []).append(value)
            elif getattr(result, name) is None:
                setattr(result, name, value)

        for name in MULTI_VALUE_FIELDS:
            setattr(result, name, single_or_list(multi.get(name, [])))
        return result


def parse_dublin_core(doc: Document, base_url: Optional[str] = None) -> DublinCoreData:
    return DublinCoreParser.parse(doc, base_url)
