"""
CredSentry Finding Model

A Finding represents one credential-like occurrence found during scanning.
The kind of a finding records which parser produced it and how it was derived.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional


class FindingKind(Enum):
    # general-purpose source code
    SOURCE_VARIABLE = "source-variable"
    SOURCE_COMMENT = "source-comment"
    SOURCE_OTHER = "source-other"

    # structured documents
    JSON_VARIABLE = "json-variable"
    JSON_LIST_VALUE = "json-list-value"
    YAML_VARIABLE = "yaml-variable"
    YAML_LIST_VALUE = "yaml-list-value"

    # markup
    XML_ELEMENT = "xml-element"
    XML_ATTRIBUTE = "xml-attribute"

    # scripting with heredocs
    PHP_VARIABLE = "php-variable"
    PHP_HEREDOC = "php-heredoc"
    PHP_CONSTANT = "php-constant"
    PHP_COMMENT = "php-comment"
    PHP_OTHER = "php-other"

    SHELL_VARIABLE = "shell-variable"

    PROPERTIES_VALUE = "properties-value"
    PROPERTIES_COMMENT = "properties-comment"

    PRIVATE_KEY = "private-key"

    GENERIC_CODE_VARIABLE = "generic-code-variable"
    GENERIC_CODE_COMMENT = "generic-code-comment"
    GENERIC_CODE_OTHER = "generic-code-other"

    GENERIC = "generic"

    @property
    def label(self) -> str:
        return KIND_LABELS[self]


KIND_LABELS = {
    FindingKind.SOURCE_VARIABLE: "Source variable",
    FindingKind.SOURCE_COMMENT: "Source comment",
    FindingKind.SOURCE_OTHER: "Source line",
    FindingKind.JSON_VARIABLE: "JSON variable",
    FindingKind.JSON_LIST_VALUE: "JSON list item",
    FindingKind.YAML_VARIABLE: "YAML variable",
    FindingKind.YAML_LIST_VALUE: "YAML list item",
    FindingKind.XML_ELEMENT: "XML element",
    FindingKind.XML_ATTRIBUTE: "XML attributes",
    FindingKind.PHP_VARIABLE: "PHP variable",
    FindingKind.PHP_HEREDOC: "PHP heredoc",
    FindingKind.PHP_CONSTANT: "PHP constant",
    FindingKind.PHP_COMMENT: "PHP comment",
    FindingKind.PHP_OTHER: "PHP line",
    FindingKind.SHELL_VARIABLE: "Shell variable",
    FindingKind.PROPERTIES_VALUE: "Property",
    FindingKind.PROPERTIES_COMMENT: "Properties comment",
    FindingKind.PRIVATE_KEY: "Private key",
    FindingKind.GENERIC_CODE_VARIABLE: "Variable",
    FindingKind.GENERIC_CODE_COMMENT: "Comment",
    FindingKind.GENERIC_CODE_OTHER: "Code line",
    FindingKind.GENERIC: "Line",
}

# Kinds whose findings carry a declared name next to the value
NAMED_KINDS = frozenset({
    FindingKind.SOURCE_VARIABLE,
    FindingKind.JSON_VARIABLE,
    FindingKind.YAML_VARIABLE,
    FindingKind.XML_ELEMENT,
    FindingKind.PHP_VARIABLE,
    FindingKind.PHP_CONSTANT,
    FindingKind.PROPERTIES_VALUE,
    FindingKind.GENERIC_CODE_VARIABLE,
})


@dataclass(frozen=True)
class Finding:
    file: str
    kind: FindingKind
    line: int = 0
    name: str = ""
    value: str = ""
    # only set when a value pattern, not the variable name, triggered the finding
    credential_type: str = ""

    def display(self) -> str:
        """Human-readable output for console printing."""
        loc = f"{self.file}:{self.line}" if self.line else self.file
        head = f"[{self.kind.label}] {loc}"
        if self.credential_type:
            head += f" ({self.credential_type})"

        if self.kind in NAMED_KINDS and self.name:
            return f"{head}\n  {self.name} = {self.value}"
        return f"{head}\n  {self.value}"

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to a dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "file": self.file,
            "kind": self.kind.value,
            "line": self.line,
            "name": self.name,
            "value": self.value,
        }
        if self.credential_type:
            result["credential_type"] = self.credential_type
        return result


@dataclass
class Statistics:
    files_found: int = 0
    files_scanned: int = 0
    results_found: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "files_found": self.files_found,
            "files_scanned": self.files_scanned,
            "results_found": self.results_found,
        }


@dataclass
class ScanResult:
    """Everything a finished scan produced."""

    findings: List[Finding] = field(default_factory=list)
    statistics: Statistics = field(default_factory=Statistics)
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def finding_count(self) -> int:
        return len(self.findings)


def sort_findings(findings: Iterable[Finding]) -> List[Finding]:
    """Order findings by file, then line, then name."""
    return sorted(findings, key=lambda f: (f.file, f.line, f.name))
