"""
CredSentry PHP Scanner

Line-oriented scanner for PHP sources. Recognised constructs:
- $variable assignments, including heredoc/nowdoc values
- class properties and class constants (public/private/protected/var/...)
- const NAME = ... constants
- define('NAME', ...) calls
- // and # comments, /* ... */ comment blocks

Any other line is checked as free text.
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Optional, Sequence

from credsentry.core.config import ScanType
from credsentry.core.finding import Finding, FindingKind
from credsentry.core.scanner import (
    BaseScanner,
    PathLike,
    read_c_style_comment,
    split_name_and_extension,
    trim_quotes,
)

PHP_EXTENSION = ".php"
PHP_TEST_SUFFIX = "Test"

HEREDOC_MARKER = "<<<"

PROPERTY_MODIFIERS = frozenset({
    "public", "private", "protected", "var", "static", "readonly", "final",
})

VALUE_COMMENT_MARKERS = ("//", "/*", "#")

_DEFINE_PATTERN = re.compile(
    r"""^define\s*\(\s*(['"])(?P<name>[^'"]+)\1\s*,\s*(?P<value>(['"]).*\4)\s*\)\s*;"""
)


class _Declaration(NamedTuple):
    kind: FindingKind
    name: str
    # name used for classification, without "$" and modifiers
    bare_name: str


class _Assignment(NamedTuple):
    value: str
    heredoc_id: str
    end: int


class PHPScanner(BaseScanner):

    name = "php"
    scan_type = ScanType.PHP

    def supports_file(self, file_path: PathLike) -> bool:
        if not self.enabled:
            return False

        name, extension = split_name_and_extension(file_path)
        if extension != PHP_EXTENSION:
            return False

        if self.config.exclude_tests and name.endswith(PHP_TEST_SUFFIX):
            return False
        return True

    def scan_file(self, file_path: PathLike) -> List[Finding]:
        findings: List[Finding] = []
        filename = str(file_path)

        lines = self._read_lines(file_path)
        if lines is None:
            return findings

        idx = 0
        while idx < len(lines):
            line_no = idx + 1
            stripped = lines[idx].strip()

            if stripped.startswith("/*"):
                body, end = read_c_style_comment(lines, idx)
                self._add_comment(filename, line_no, body, findings)
                idx = end + 1
                continue

            if stripped.startswith("//") or (stripped.startswith("#") and not stripped.startswith("#[")):
                self._add_comment(filename, line_no, stripped, findings)
                idx += 1
                continue

            if stripped.startswith("define"):
                if self._add_define(filename, line_no, stripped, findings):
                    idx += 1
                    continue

            declaration = _parse_declaration(stripped)
            if declaration is not None:
                assignment = _parse_assignment(lines, idx, stripped)
                if assignment is not None:
                    self._add_assignment(filename, line_no, declaration, assignment, findings)
                    idx = assignment.end + 1
                    continue

            match = self.classifier.classify_free_text(stripped)
            if match is not None:
                findings.append(Finding(
                    file=filename,
                    kind=FindingKind.PHP_OTHER,
                    line=line_no,
                    value=stripped,
                    credential_type=match.category,
                ))
            idx += 1

        return findings

    def _add_comment(self, filename: str, line_no: int, body: str, findings: List[Finding]) -> None:
        if self.config.exclude_comments:
            return

        match = self.classifier.classify_free_text(body)
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.PHP_COMMENT,
                line=line_no,
                value=body,
                credential_type=match.category,
            ))

    def _add_define(self, filename: str, line_no: int, line: str, findings: List[Finding]) -> bool:
        m = _DEFINE_PATTERN.match(line)
        if m is None:
            return False

        name, value = m.group("name"), m.group("value")
        match = self.classifier.classify_named_value(name, trim_quotes(value))
        if match is not None:
            findings.append(Finding(
                file=filename,
                kind=FindingKind.PHP_CONSTANT,
                line=line_no,
                name=name,
                value=value,
                credential_type=match.category,
            ))
        return True

    def _add_assignment(
        self,
        filename: str,
        line_no: int,
        declaration: _Declaration,
        assignment: _Assignment,
        findings: List[Finding],
    ) -> None:
        if not assignment.value:
            return

        match = self.classifier.classify_named_value(declaration.bare_name, trim_quotes(assignment.value))
        if match is None:
            return

        if assignment.heredoc_id:
            kind = FindingKind.PHP_HEREDOC
            value = f"{HEREDOC_MARKER}{assignment.heredoc_id}\n{assignment.value}\n{assignment.heredoc_id}"
        else:
            kind = declaration.kind
            value = assignment.value

        findings.append(Finding(
            file=filename,
            kind=kind,
            line=line_no,
            name=declaration.name,
            value=value,
            credential_type=match.category,
        ))


def _parse_declaration(line: str) -> Optional[_Declaration]:
    """Recognise the left-hand side of a variable, property or constant."""
    if "=" not in line:
        return None

    name = line.split("=", 1)[0].strip()
    tokens = name.split()
    if not tokens:
        return None

    if name.startswith("$") and len(tokens) == 1:
        return _Declaration(FindingKind.PHP_VARIABLE, name, name[1:])

    if tokens[0] == "const" and len(tokens) == 2:
        return _Declaration(FindingKind.PHP_CONSTANT, name, tokens[1])

    if tokens[0] in PROPERTY_MODIFIERS and len(tokens) >= 2:
        last = tokens[-1]
        if "const" in tokens[:-1]:
            return _Declaration(FindingKind.PHP_CONSTANT, name, last)
        if last.startswith("$"):
            return _Declaration(FindingKind.PHP_VARIABLE, name, last[1:])

    return None


def _parse_assignment(lines: Sequence[str], idx: int, line: str) -> Optional[_Assignment]:
    """Parse the right-hand side of the assignment at ``lines[idx]``.

    Returns None when the value is neither a quoted literal nor a heredoc.
    A heredoc that is never terminated consumes the rest of the file and
    yields an empty value.
    """
    value = _cut_trailing_comment(line.split("=", 1)[1].strip())

    if value[:1] in ("'", '"') and ";" in value:
        # "string" . $var is kept, $var . "string" is not
        return _Assignment(value[:value.rfind(";")].strip(), "", idx)

    if value.startswith(HEREDOC_MARKER):
        identifier = value[len(HEREDOC_MARKER):].strip().strip("'\"")
        if not identifier:
            return None

        body: List[str] = []
        end = idx + 1
        while end < len(lines):
            if lines[end].strip().startswith(identifier + ";"):
                return _Assignment("\n".join(body), identifier, end)
            body.append(lines[end])
            end += 1
        return _Assignment("", identifier, len(lines) - 1)

    return None


def _cut_trailing_comment(value: str) -> str:
    for marker in VALUE_COMMENT_MARKERS:
        pos = value.rfind(marker)
        if pos > 0 and value[:pos].rstrip().endswith(";"):
            value = value[:pos].rstrip()
    return value
