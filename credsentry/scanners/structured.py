"""
CredSentry Structured Document Walker

Shared walk for formats that decode into nested maps, lists and scalars.
String values in a map are classified against their key; strings in a list
are classified as free text; nested maps and lists are walked the same way.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Iterable, List, Set

from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike

logger = logging.getLogger(__name__)


class TreeDocumentScanner(BaseScanner):

    variable_kind: FindingKind
    list_kind: FindingKind

    @abstractmethod
    def decode(self, content: str) -> Iterable[Any]:
        """Decode file content into its documents. Raises ValueError on malformed input."""
        raise NotImplementedError

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []

        content = self._read_text(file_path)
        if not content:
            return findings

        try:
            documents = list(self.decode(content))
        except (ValueError, RecursionError) as exc:
            logger.debug("could not decode %s from %s: %s", self.name, file_path, exc)
            return findings

        # YAML aliases share one object per anchor and may refer to themselves
        seen: Set[int] = set()
        try:
            for document in documents:
                self._walk(str(file_path), "", document, findings, seen)
        except RecursionError:
            logger.debug("%s nests too deeply, stopped walking", file_path)
        return findings

    def _walk(self, filename: str, key: str, node: Any, findings: List[Finding], seen: Set[int]) -> None:
        if not isinstance(node, (dict, list)):
            return
        if id(node) in seen:
            return
        seen.add(id(node))

        if isinstance(node, dict):
            self._walk_map(filename, node, findings, seen)
        else:
            self._walk_list(filename, key, node, findings, seen)

    def _walk_map(self, filename: str, m: dict, findings: List[Finding], seen: Set[int]) -> None:
        for k, v in m.items():
            # YAML keys may be ints, dates or booleans
            key = str(k)
            if isinstance(v, str):
                match = self.classifier.classify_named_value(key, v)
                if match is not None:
                    findings.append(Finding(
                        file=filename,
                        kind=self.variable_kind,
                        name=key,
                        value=v,
                        credential_type=match.category,
                    ))
            else:
                self._walk(filename, key, v, findings, seen)

    def _walk_list(self, filename: str, key: str, items: list, findings: List[Finding], seen: Set[int]) -> None:
        for item in items:
            if isinstance(item, str):
                match = self.classifier.classify_free_text(item)
                if match is not None:
                    findings.append(Finding(
                        file=filename,
                        kind=self.list_kind,
                        name=key,
                        value=item,
                        credential_type=match.category,
                    ))
            else:
                self._walk(filename, key, item, findings, seen)
