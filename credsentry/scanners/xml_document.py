"""
CredSentry XML Scanner

Parses XML with ElementTree and turns each element into a map (attributes
under "@name" keys, text content under "#text", repeated children as lists)
before walking it. Besides plain element values, each element's attributes
are examined as a group, which catches indirections like
<property name="api_key" value="..."/> and <entry key="password">...</entry>.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

from credsentry.core.classifier import NAME_MATCH, CredentialMatch
from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike, split_name_and_extension

logger = logging.getLogger(__name__)

XML_EXTENSION = ".xml"

ATTRIBUTE_PREFIX = "@"
TEXT_PREFIX = "#"
TEXT_KEY = "#text"
NAME_ATTRIBUTE = "name"

# attributes which may name the purpose of an element's text body
IDENTIFIER_ATTRIBUTES = frozenset({"id", "key", "name"})


class XMLScanner(BaseScanner):

    name = "xml"
    scan_type = ScanType.XML

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        return extension == XML_EXTENSION

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []

        content = self._read_text(file_path)
        if not content:
            return findings

        try:
            root = ElementTree.fromstring(content.lstrip("\ufeff"))
        except ElementTree.ParseError as exc:
            logger.debug("could not parse %s: %s", file_path, exc)
            return findings

        document = {_local_name(root.tag): element_to_map(root)}
        self._walk_map(str(file_path), document, "", findings)
        return findings

    def _walk_map(self, filename: str, m: Dict[str, Any], parent: str, findings: List[Finding]) -> None:
        siblings: Dict[str, str] = {}
        text_body = ""

        for k, v in m.items():
            if v is None:
                continue

            if isinstance(v, str):
                if k == TEXT_KEY:
                    text_body = v

                if k.startswith(ATTRIBUTE_PREFIX):
                    siblings[k[len(ATTRIBUTE_PREFIX):]] = v
                elif k.startswith(TEXT_PREFIX):
                    self._add_element(filename, parent, v, findings)
                else:
                    self._add_element(filename, k, v, findings)
            elif isinstance(v, list):
                for item in v:
                    if isinstance(item, dict):
                        self._walk_map(filename, item, k, findings)
                    elif isinstance(item, str):
                        # repeated text-only elements
                        self._add_element(filename, k, item, findings)
            elif isinstance(v, dict):
                self._walk_map(filename, v, k, findings)

        if text_body:
            match = self._text_body_match(text_body, siblings)
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.XML_ATTRIBUTE,
                    name=parent,
                    value=build_element_line(parent, siblings, text_body),
                    credential_type=match.category,
                ))

        match = self._attributes_match(siblings)
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.XML_ATTRIBUTE,
                name=parent,
                value=build_attribute_line(parent, siblings),
                credential_type=match.category,
            ))

    def _add_element(self, filename: str, name: str, value: str, findings: List[Finding]) -> None:
        match = self.classifier.classify_named_value(name, value)
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.XML_ELEMENT,
                name=name,
                value=value,
                credential_type=match.category,
            ))

    def _text_body_match(self, body: str, siblings: Dict[str, str]) -> Optional[CredentialMatch]:
        for k, v in siblings.items():
            if k not in IDENTIFIER_ATTRIBUTES:
                continue
            match = self.classifier.classify_named_value(v, body)
            if match is not None:
                return match
        return None

    def _attributes_match(self, siblings: Dict[str, str]) -> Optional[CredentialMatch]:
        """Sibling attribute heuristic.

        1. Each attribute as its own key/value pair.
        2. With a "name" attribute, its value as the name of every other
           attribute value. Nothing further is tried in that case.
        3. Otherwise, with at least two values long enough and none of them
           excluded, any value that looks like a suspicious name.
        """
        classifier = self.classifier

        for k, v in siblings.items():
            if classifier.is_excluded_xml_attribute(k, v):
                return None
            match = classifier.classify_named_value(k, v)
            if match is not None:
                return match

        if len(siblings) < 2:
            return None

        if NAME_ATTRIBUTE in siblings:
            name = siblings[NAME_ATTRIBUTE]
            for v in siblings.values():
                if v == name:
                    continue
                match = classifier.classify_named_value(name, v)
                if match is not None:
                    return match
            return None

        long_enough = 0
        for v in siblings.values():
            if len(v) < classifier.min_length:
                continue
            long_enough += 1
            if classifier.is_excluded_name(v) or classifier.is_excluded_value(v):
                return None

        if long_enough < 2:
            return None

        for v in siblings.values():
            if classifier.is_suspicious_name(v) and not classifier.is_excluded_name(v):
                return NAME_MATCH
        return None


def build_attribute_line(parent: str, siblings: Dict[str, str]) -> str:
    attributes = sorted(f' {k}="{v}"' for k, v in siblings.items())
    return f"<{parent}{''.join(attributes)}>"


def build_element_line(parent: str, siblings: Dict[str, str], body: str) -> str:
    return f"{build_attribute_line(parent, siblings)}{body}</{parent}>"


def _local_name(tag: str) -> str:
    # "{uri}name" -> "name"
    return tag.rsplit("}", 1)[-1]


def element_to_map(element: ElementTree.Element) -> Any:
    """Convert an element to nested maps.

    Attributes become "@name" keys, child elements are keyed by tag (a
    repeated tag holds a list) and non-blank text goes under "#text". An
    element with neither attributes nor children converts to its stripped
    text, or None when it has none.
    """
    pieces = [element.text or ""] + [child.tail or "" for child in element]
    text = "".join(pieces).strip()

    if not element.attrib and len(element) == 0:
        return text or None

    m: Dict[str, Any] = {}
    for k, v in element.attrib.items():
        m[ATTRIBUTE_PREFIX + _local_name(k)] = v

    for child in element:
        key = _local_name(child.tag)
        value = element_to_map(child)
        if key not in m:
            m[key] = value
        elif isinstance(m[key], list):
            m[key].append(value)
        else:
            m[key] = [m[key], value]

    if text:
        m[TEXT_KEY] = text
    return m
