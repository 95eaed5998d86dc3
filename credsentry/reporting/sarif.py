"""
CredSentry SARIF Reporter

Generates SARIF 2.1.0 (Static Analysis Results Interchange Format) output
for integration with:
- GitHub Code Scanning / Security tab
- Azure DevOps
- Visual Studio / VSCode

There is one rule per finding kind. Credential values are left out of the
messages, since SARIF files are usually uploaded somewhere.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from credsentry import __version__
from credsentry.core.finding import Finding, FindingKind, sort_findings

RULE_PREFIX = "credsentry"


def rule_id(kind: FindingKind) -> str:
    return f"{RULE_PREFIX}/{kind.value}"


def _level(finding: Finding) -> str:
    # value-shaped matches and key files are far less likely to be noise
    if finding.credential_type or finding.kind is FindingKind.PRIVATE_KEY:
        return "error"
    return "warning"


def _message(finding: Finding) -> str:
    if finding.credential_type:
        text = f"Possible hard-coded credential ({finding.credential_type})"
    elif finding.kind is FindingKind.PRIVATE_KEY:
        text = "Private key or certificate committed to the repository"
    else:
        text = "Possible hard-coded credential"

    if finding.name:
        text += f" in '{finding.name}'"
    return text + "."


class SARIFReporter:
    """Generates SARIF 2.1.0-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        findings: list[Finding],
        output_file: Optional[str] = None,
    ) -> str:
        """
        Generate SARIF report.

        Args:
            findings: Findings of a finished scan.
            output_file: Optional file path to write the report to.

        Returns:
            The SARIF JSON string.
        """
        rules_map: dict[str, dict] = {}
        results: list[dict] = []

        for finding in sort_findings(findings):
            rid = rule_id(finding.kind)
            if rid not in rules_map:
                rules_map[rid] = {
                    "id": rid,
                    "name": finding.kind.label,
                    "shortDescription": {"text": f"Hard-coded credential: {finding.kind.label}"},
                    "defaultConfiguration": {"level": "warning"},
                    "properties": {"tags": ["security", "secrets"]},
                    "help": {
                        "text": "Move the credential to a secret store or environment variable and rotate it.",
                    },
                }

            file_path = self._artifact_uri(finding.file)
            result: dict = {
                "ruleId": rid,
                "ruleIndex": list(rules_map.keys()).index(rid),
                "level": _level(finding),
                "message": {"text": _message(finding)},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {
                                "uri": file_path,
                                "uriBaseId": "%SRCROOT%",
                            },
                            "region": {
                                "startLine": max(1, finding.line),
                                "startColumn": 1,
                            },
                        }
                    }
                ],
            }
            results.append(result)

        sarif = {
            "$schema": "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/sarif-schema-2.1.0.json",
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "CredSentry",
                            "version": __version__,
                            "rules": list(rules_map.values()),
                        }
                    },
                    "results": results,
                    "columnKind": "utf16CodeUnits",
                }
            ],
        }

        sarif_str = json.dumps(sarif, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(sarif_str, encoding="utf-8")

        return sarif_str

    def _artifact_uri(self, file: str) -> str:
        """Path of ``file`` relative to the scan target, when it lies below it."""
        base = self.target if os.path.isdir(self.target) else os.path.dirname(self.target)
        try:
            relative = os.path.relpath(file, base or ".")
        except ValueError:
            # different drives on Windows
            relative = file
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            relative = file
        return str(relative).replace("\\", "/")
