"""
CredSentry Shell Scanner

Finds quoted variable assignments in shell scripts:
NAME="value", NAME='value' and export NAME="value".
"""

from __future__ import annotations

import re
from typing import List

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike, split_name_and_extension, trim_quotes

SHELL_EXTENSIONS = {".sh", ".bash"}

_ASSIGNMENT_PATTERN = re.compile(r"""^(?:export\s+)?(?P<name>[a-zA-Z_][a-zA-Z0-9_]*)=(?P<value>['"].+)""")


class ShellScanner(BaseScanner):

    name = "shell"
    scan_type = ScanType.SHELL

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        return extension in SHELL_EXTENSIONS

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        lines = self._read_lines(file_path)
        if lines is None:
            return findings

        for line_no, line in enumerate(lines, start=1):
            line = line.strip()
            m = _ASSIGNMENT_PATTERN.match(line)
            if m is None:
                continue

            name = m.group("name")
            match = self.classifier.classify_named_value(name, trim_quotes(m.group("value")))
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.SHELL_VARIABLE,
                    line=line_no,
                    name=name,
                    value=line,
                    credential_type=match.category,
                ))

        return findings
