"""
CredSentry CLI

Command-line interface for running credential scans.

Commands:
    credsentry scan [PATH]          - Scan a file or directory tree
    credsentry init                 - Create a default config file
    credsentry history [PATH]       - Scan every commit of a git repository
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from credsentry import __version__
from credsentry.core.config import CONFIG_FILENAME, ConfigError, CredentialConfig, generate_default_config
from credsentry.core.engine import ScanEngine
from credsentry.history import HistoryError, scan_history
from credsentry.reporting.console import ConsoleReporter, _safe_echo
from credsentry.reporting.json_reporter import JSONReporter
from credsentry.reporting.sarif import SARIFReporter

# exit codes
EXIT_FINDINGS = 1
EXIT_ERROR = 2


@click.group()
@click.version_option(version=__version__, prog_name="CredSentry")
def cli() -> None:
    """
    CredSentry - Hard-coded credential detector

    Find passwords, tokens, API keys and private keys committed to
    source trees.
    """
    pass


def _config_options(func):
    func = click.option("--root-config", "root_config_path", type=click.Path(), default=None,
                        help="Replace the built-in defaults with this configuration file.")(func)
    func = click.option("--config", "config_path", type=click.Path(), default=None,
                        help=f"Configuration merged on top of the defaults (default: PATH/{CONFIG_FILENAME}).")(func)
    return func


# ═══════════════════════════════════════════════════════
#  credsentry scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@_config_options
@click.option("--format", "-f", "output_format", type=click.Choice(["console", "json", "sarif"]),
              default="console", help="Output format (default: console).")
@click.option("--output", "-o", "output_file", type=click.Path(), default=None,
              help="Write report to a file.")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Number of scanning threads (default: CPU count).")
@click.option("--verbose", "-v", is_flag=True, help="Log files that could not be read or parsed.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--no-fail", is_flag=True, help="Exit with 0 even when credentials are found.")
def scan(
    path: str,
    config_path: Optional[str],
    root_config_path: Optional[str],
    output_format: str,
    output_file: Optional[str],
    workers: Optional[int],
    verbose: bool,
    no_color: bool,
    no_fail: bool,
) -> None:
    """Scan a file or directory for hard-coded credentials.

    Examples:

        credsentry scan

        credsentry scan ./src --format json --output results.json

        credsentry scan --format sarif --output results.sarif --no-fail
    """
    target = Path(path).resolve()
    config = _load_config(target, config_path, root_config_path)
    _configure_logging(verbose or config.verbose)

    try:
        engine = ScanEngine(config, workers=workers)
    except ConfigError as exc:
        _fail(f"invalid configuration: {exc}")

    result = engine.scan(target)

    if output_format == "json":
        reporter = JSONReporter(target=str(target))
        json_str = reporter.report(result.findings, result.statistics, output_file=output_file, error=result.error)
        if not output_file:
            _safe_echo(json_str)
    elif output_format == "sarif":
        reporter = SARIFReporter(target=str(target))
        sarif_str = reporter.report(result.findings, output_file=output_file)
        if not output_file:
            _safe_echo(sarif_str)
    else:
        console = ConsoleReporter(target=str(target), color=_color(no_color, config))
        console.report(result.findings, result.statistics, result.error)
        if output_file:
            # Also write JSON when console + output file
            JSONReporter(target=str(target)).report(
                result.findings, result.statistics, output_file=output_file, error=result.error
            )

    if not result.success:
        sys.exit(EXIT_ERROR)
    if result.findings and not no_fail:
        sys.exit(EXIT_FINDINGS)


# ═══════════════════════════════════════════════════════
#  credsentry init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(), default=".",
              help="Directory to create the config file in.")
def init(target_path: str) -> None:
    """Create a default .credsentry.yaml."""
    target = Path(target_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    config_file = target / CONFIG_FILENAME

    if config_file.exists():
        _safe_echo(click.style(f"  [!] {config_file} already exists, skipping.", fg="yellow"))
    else:
        config_file.write_text(generate_default_config(), encoding="utf-8")
        _safe_echo(click.style(f"  [+] Created {config_file}", fg="green"))

    _safe_echo("")
    _safe_echo("  Edit this file to tune patterns and exclusions.")
    _safe_echo("  Run 'credsentry scan' to start scanning.")


# ═══════════════════════════════════════════════════════
#  credsentry history
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@_config_options
@click.option("--max-commits", "-n", type=click.IntRange(min=1), default=None,
              help="Only scan the N most recent commits.")
@click.option("--format", "-f", "output_format", type=click.Choice(["console", "json"]),
              default="console", help="Output format (default: console).")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Number of scanning threads (default: CPU count).")
@click.option("--verbose", "-v", is_flag=True, help="Log files that could not be read or parsed.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--no-fail", is_flag=True, help="Exit with 0 even when credentials are found.")
def history(
    path: str,
    config_path: Optional[str],
    root_config_path: Optional[str],
    max_commits: Optional[int],
    output_format: str,
    workers: Optional[int],
    verbose: bool,
    no_color: bool,
    no_fail: bool,
) -> None:
    """Scan every commit of a git repository, newest first.

    Example:

        credsentry history . --max-commits 50
    """
    target = Path(path).resolve()
    config = _load_config(target, config_path, root_config_path)
    _configure_logging(verbose or config.verbose)

    found = False
    commits = []
    try:
        for commit_scan in scan_history(str(target), config, workers=workers, max_commits=max_commits):
            result = commit_scan.result
            found = found or bool(result.findings)

            if output_format == "json":
                report = json.loads(JSONReporter(target=commit_scan.commit).report(
                    result.findings, result.statistics, error=result.error
                ))
                commits.append({"commit": commit_scan.commit, **report})
            elif result.findings:
                _safe_echo(f"Found {result.finding_count} result(s) in commit {commit_scan.commit}")
                ConsoleReporter(target=commit_scan.commit, color=_color(no_color, config)).report(
                    result.findings, result.statistics, result.error
                )
            else:
                _safe_echo(f"No results found in commit {commit_scan.commit}")
    except HistoryError as exc:
        _fail(str(exc))
    except ConfigError as exc:
        _fail(f"invalid configuration: {exc}")

    if output_format == "json":
        _safe_echo(json.dumps({"target": str(target), "commits": commits}, indent=2))

    if found and not no_fail:
        sys.exit(EXIT_FINDINGS)


# ── Helpers ──

def _load_config(
    target: Path,
    config_path: Optional[str],
    root_config_path: Optional[str],
) -> CredentialConfig:
    if config_path is None:
        candidate = (target if target.is_dir() else target.parent) / CONFIG_FILENAME
        if candidate.is_file():
            config_path = str(candidate)

    try:
        return CredentialConfig.load(
            Path(config_path) if config_path else None,
            Path(root_config_path) if root_config_path else None,
        )
    except ConfigError as exc:
        _fail(str(exc))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _color(no_color: bool, config: CredentialConfig) -> Optional[bool]:
    if no_color or config.disable_output_colors:
        return False
    return None


def _fail(message: str) -> None:
    _safe_echo(click.style(f"  [X] {message}", fg="red"), err=True)
    sys.exit(EXIT_ERROR)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
