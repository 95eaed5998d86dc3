"""
CredSentry JSON Scanner

Decodes JSON documents and walks them for credential-like fields.
Package manifests and lock files are skipped; they only hold dependency
metadata and checksums.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from credsentry.core.config import ScanType
from credsentry.core.finding import FindingKind
from credsentry.core.scanner import PathLike, split_name_and_extension
from credsentry.scanners.structured import TreeDocumentScanner

JSON_EXTENSION = ".json"

IGNORED_SUFFIXES = (
    "lock.json",
    "package.json",
    "composer.json",
)


class JSONScanner(TreeDocumentScanner):

    name = "json"
    scan_type = ScanType.JSON
    variable_kind = FindingKind.JSON_VARIABLE
    list_kind = FindingKind.JSON_LIST_VALUE

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        if extension != JSON_EXTENSION:
            return False
        return not str(file_path).endswith(IGNORED_SUFFIXES)

    def decode(self, content: str) -> Iterable[Any]:
        # json.JSONDecodeError is a ValueError
        return [json.loads(content.lstrip("\ufeff"))]
