"""
KeyScan Console Reporter

Generates human-readable colored console output, with findings grouped
by file.
"""

from __future__ import annotations

import sys

import click

from keyscan import __version__
from keyscan.core.finding import group_by_file
from keyscan.core.scanner import ScanResult


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


class ConsoleReporter:
    """Prints a formatted scan report to the console."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(self, result: ScanResult) -> None:
        self._print_header()
        self._print_summary(result)
        if result.warnings:
            self._print_warnings(result.warnings)
        if result.findings:
            self._print_findings(result)
        self._print_footer(result)

    def _print_header(self) -> None:
        _safe_echo("")
        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo(click.style("  KeyScan AI API Key Report", fg="bright_white", bold=True))
        _safe_echo(click.style(f"  Version: {__version__}", fg="white"))
        _safe_echo(click.style(f"  Target: {self.target}", fg="white"))
        _safe_echo(click.style("=" * 55, fg="bright_blue"))

    def _print_summary(self, result: ScanResult) -> None:
        _safe_echo("")
        _safe_echo(
            click.style("  Files scanned: ", fg="bright_white")
            + click.style(str(result.files_scanned), fg="white")
            + click.style(f"  (ignored: {result.files_ignored})", fg="bright_black")
        )
        _safe_echo(
            click.style("  Keys found:    ", fg="bright_white")
            + click.style(str(len(result.findings)), fg="red" if result.findings else "green")
        )

    def _print_warnings(self, warnings: list[str]) -> None:
        _safe_echo("")
        for warning in warnings:
            _safe_echo(click.style(f"  [!] {warning}", fg="yellow"))

    def _print_findings(self, result: ScanResult) -> None:
        _safe_echo("")
        _safe_echo(click.style("  Detailed Findings:", fg="bright_white", bold=True))
        _safe_echo(click.style("-" * 55, fg="bright_black"))

        for file, findings in group_by_file(result.findings).items():
            _safe_echo("")
            _safe_echo(click.style(f"  {file}", fg="bright_white", bold=True))
            for finding in findings:
                _safe_echo(
                    click.style(f"    Line {finding.line}: ", fg="white")
                    + click.style(finding.key_type, fg="red")
                    + click.style(f" ({finding.match})", fg="bright_black")
                )

    def _print_footer(self, result: ScanResult) -> None:
        _safe_echo("")
        _safe_echo(click.style("=" * 55, fg="bright_blue"))

        if result.passed:
            _safe_echo(
                click.style("  [OK] PASSED - No AI API keys detected", fg="green", bold=True)
            )
        else:
            _safe_echo(
                click.style(
                    "  [X] FAILED - Remove these keys and rotate them immediately",
                    fg="bright_red",
                    bold=True,
                )
            )

        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo("")
