"""
CredSentry Console Reporter

Human-readable report grouped by file. Each finding is printed in the
syntax of the format it was found in.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from credsentry import __version__
from credsentry.core.finding import Finding, FindingKind, Statistics, sort_findings


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


_LIST_KINDS = {
    FindingKind.JSON_LIST_VALUE: '"{name}": [\n  ...\n  "{value}",\n  ...\n]',
    FindingKind.YAML_LIST_VALUE: "{name}:\n  ...\n  - {value}\n  ...",
}

_TREE_KINDS = {
    FindingKind.JSON_VARIABLE: '"{name}": "{value}"',
    FindingKind.YAML_VARIABLE: '{name}: "{value}"',
    FindingKind.XML_ELEMENT: "<{name}>{value}</{name}>",
    FindingKind.XML_ATTRIBUTE: "{value}",
}


def format_finding(finding: Finding) -> tuple[str, str]:
    """Return the heading and body printed for one finding."""
    if finding.kind in _LIST_KINDS:
        heading = f"{finding.kind.label}:"
        body = _LIST_KINDS[finding.kind].format(name=finding.name, value=finding.value)
    elif finding.kind in _TREE_KINDS:
        heading = f"{finding.kind.label}:"
        body = _TREE_KINDS[finding.kind].format(name=finding.name, value=finding.value)
    else:
        heading = f"Line {finding.line} ({finding.kind.label}):"
        if finding.kind.value.endswith(("-variable", "-constant", "-value")) and finding.name:
            body = f"{finding.name} = {finding.value}"
        else:
            body = finding.value

    if finding.credential_type:
        heading += f" [{finding.credential_type}]"
    return heading, body


class ConsoleReporter:
    """Prints the scan report to the console."""

    def __init__(self, target: str, color: Optional[bool] = None) -> None:
        self.target = target
        # None lets click decide from the terminal
        self.color = color

    def report(
        self,
        findings: list[Finding],
        statistics: Optional[Statistics] = None,
        error: Optional[Exception] = None,
    ) -> None:
        """
        Print the full scan report.

        Args:
            findings: Findings of a finished scan, in any order.
            statistics: Counters of the scan.
            error: The walk error, when the scan did not complete.
        """
        self._print_header()

        if findings:
            self._print_findings(sort_findings(findings))

        self._print_footer(findings, statistics, error)

    def _echo(self, text: str = "", **kwargs) -> None:
        _safe_echo(text, color=self.color, **kwargs)

    def _print_header(self) -> None:
        self._echo("")
        self._echo(click.style("=" * 55, fg="bright_blue"))
        self._echo(click.style("  CredSentry Credential Scan Report", fg="bright_white", bold=True))
        self._echo(click.style(f"  Version: {__version__}", fg="white"))
        self._echo(click.style(f"  Target: {self.target}", fg="white"))
        self._echo(click.style("=" * 55, fg="bright_blue"))

    def _print_findings(self, findings: list[Finding]) -> None:
        current_file = None
        for finding in findings:
            if finding.file != current_file:
                current_file = finding.file
                self._echo("")
                self._echo(click.style(f" In {current_file} ", fg="bright_white", bg="red", bold=True))

            heading, body = format_finding(finding)
            self._echo("")
            self._echo(click.style(f"  {heading}", fg="yellow"))
            for line in body.split("\n"):
                self._echo(f"    {line}")

    def _print_footer(
        self,
        findings: list[Finding],
        statistics: Optional[Statistics],
        error: Optional[Exception],
    ) -> None:
        self._echo("")
        self._echo(click.style("=" * 55, fg="bright_blue"))

        if statistics is not None:
            self._echo(click.style("  Statistics:", fg="bright_white", bold=True))
            self._echo(click.style(f"     Files found:   {statistics.files_found}", fg="white"))
            self._echo(click.style(f"     Files scanned: {statistics.files_scanned}", fg="white"))
            self._echo(click.style(f"     Results found: {statistics.results_found}", fg="white"))
            self._echo("")

        if error is not None:
            self._echo(click.style(f"  [X] SCAN INCOMPLETE - {error}", fg="bright_red", bold=True))
        elif not findings:
            self._echo(click.style("  [OK] PASSED - No hard-coded credentials found", fg="green", bold=True))
        else:
            self._echo(
                click.style(
                    f"  [!] FOUND {len(findings)} possible credential(s) - Review the findings above",
                    fg="yellow",
                    bold=True,
                )
            )

        self._echo(click.style("=" * 55, fg="bright_blue"))
        self._echo("")
