"""
CredSentry JSON Reporter

Generates machine-readable JSON output format:
{
    "version": "1.0",
    "summary": {
        "total_findings": N,
        "by_kind": {"json-variable": n, ...},
        "statistics": {"files_found": n, "files_scanned": n, "results_found": n}
    },
    "findings": [...]
}
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Optional

from credsentry import __version__
from credsentry.core.finding import Finding, Statistics, sort_findings


class JSONReporter:
    """Generates JSON-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(
        self,
        findings: list[Finding],
        statistics: Optional[Statistics] = None,
        output_file: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> str:
        """
        Generate JSON report.

        Args:
            findings: Findings of a finished scan.
            statistics: Counters of the scan.
            output_file: Optional file path to write the report to.
            error: The walk error, when the scan did not complete.

        Returns:
            The JSON string.
        """
        ordered = sort_findings(findings)

        summary = {
            "total_findings": len(ordered),
            "by_kind": dict(Counter(f.kind.value for f in ordered)),
        }
        if statistics is not None:
            summary["statistics"] = statistics.to_dict()

        report_data = {
            "version": "1.0",
            "tool": {
                "name": "CredSentry",
                "version": __version__,
            },
            "target": self.target,
            "summary": summary,
            "findings": [f.to_dict() for f in ordered],
        }
        if error is not None:
            report_data["error"] = str(error)

        json_str = json.dumps(report_data, indent=2, default=str)

        if output_file:
            Path(output_file).write_text(json_str, encoding="utf-8")

        return json_str
