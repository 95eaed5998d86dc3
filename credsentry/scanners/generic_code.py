"""
CredSentry Generic Code Scanner

Line-oriented scanner for C-like languages without a dedicated parser
(Java, JavaScript, Go, C#, ...). A line starting with a declaration keyword
and containing "=" is a declaration; only string literal values are
classified by name. Comments and every other line are checked as free text.
"""

from __future__ import annotations

from typing import List

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import (
    BaseScanner,
    PathLike,
    read_c_style_comment,
    split_name_and_extension,
    trim_quotes,
    trim_semicolon,
)

DECLARATION_KEYWORDS = frozenset({
    "public",
    "private",
    "protected",
    "static",
    "var",
    "const",
    "string",
    "std::string",
    "final",
})


def is_declaration(line: str) -> bool:
    first = line.split(" ", 1)[0]
    return first.lower() in DECLARATION_KEYWORDS and "=" in line


class GenericCodeScanner(BaseScanner):

    name = "genericCode"
    scan_type = ScanType.GENERIC_CODE

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        _, extension = split_name_and_extension(file_path)
        extension = extension.lstrip(".").lower()
        return bool(extension) and extension in self.config.generic_code_file_extensions

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        lines = self._read_lines(file_path)
        if lines is None:
            return findings

        idx = 0
        while idx < len(lines):
            line_no = idx + 1
            line = lines[idx].strip()

            if is_declaration(line):
                self._add_declaration(filename, line_no, line, findings)
            elif line.startswith("//"):
                self._add_comment(filename, line_no, line, findings)
            elif line.startswith("/*"):
                body, idx = read_c_style_comment(lines, idx)
                self._add_comment(filename, line_no, body, findings)
            else:
                match = self.classifier.classify_free_text(line)
                if match is not None:
                    findings.append(Finding(
                        file=filename,
                        kind=FindingKind.GENERIC_CODE_OTHER,
                        line=line_no,
                        value=line,
                        credential_type=match.category,
                    ))
            idx += 1

        return findings

    def _add_declaration(self, filename: str, line_no: int, line: str, findings: List[Finding]) -> None:
        left, right = line.split("=", 1)
        var_name = left.strip().split(" ")[-1]

        value = trim_semicolon(right)
        unquoted = trim_quotes(value)
        if value == unquoted:
            # not a string literal
            return

        match = self.classifier.classify_named_value(var_name, unquoted)
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.GENERIC_CODE_VARIABLE,
                line=line_no,
                name=var_name,
                value=value,
                credential_type=match.category,
            ))

    def _add_comment(self, filename: str, line_no: int, body: str, findings: List[Finding]) -> None:
        if self.config.exclude_comments:
            return

        match = self.classifier.classify_free_text(body)
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.GENERIC_CODE_COMMENT,
                line=line_no,
                value=body,
                credential_type=match.category,
            ))
