"""
CredSentry Generic Text Scanner

Catch-all for configured text extensions: every line is checked for
credential-shaped values, with no assumptions about syntax.
"""

from __future__ import annotations

from typing import List

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike, split_name_and_extension


class GenericTextScanner(BaseScanner):

    name = "generic"
    scan_type = ScanType.GENERIC

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        extension = extension.lstrip(".").lower()
        return bool(extension) and extension in self.config.generic_file_extensions

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        lines = self._read_lines(file_path)
        if lines is None:
            return findings

        for line_no, line in enumerate(lines, start=1):
            line = line.strip()
            match = self.classifier.classify_free_text(line)
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.GENERIC,
                    line=line_no,
                    value=line,
                    credential_type=match.category,
                ))

        return findings
