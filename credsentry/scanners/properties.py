"""
CredSentry Properties Scanner

key=value files: Java .properties, .env and other extensionless dotfiles.
Lines starting with # are comments.
"""

from __future__ import annotations

import os
from typing import List

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import BaseScanner, PathLike, split_name_and_extension

PROPERTIES_EXTENSION = ".properties"
ENV_FILE = ".env"


class PropertiesScanner(BaseScanner):

    name = "properties"
    scan_type = ScanType.PROPERTIES

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        name, extension = split_name_and_extension(file_path)
        if name == "" or extension == PROPERTIES_EXTENSION:
            return True

        # .env.local, .env.production, ...
        return os.path.basename(str(file_path)).startswith(ENV_FILE + ".")

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        lines = self._read_lines(file_path)
        if lines is None:
            return findings

        for line_no, line in enumerate(lines, start=1):
            if line.startswith("#"):
                if self.config.exclude_comments:
                    continue
                comment = line.strip()
                match = self.classifier.classify_free_text(comment)
                if match is not None:
                    findings.append(Finding(
                        file=filename,
                        kind=FindingKind.PROPERTIES_COMMENT,
                        line=line_no,
                        value=comment,
                        credential_type=match.category,
                    ))
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key, value = key.strip(), value.strip()
            if not key:
                continue

            match = self.classifier.classify_named_value(key, value)
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.PROPERTIES_VALUE,
                    line=line_no,
                    name=key,
                    value=value,
                    credential_type=match.category,
                ))

        return findings
