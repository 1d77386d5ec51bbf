"""
KeyScan CLI

Command-line interface for scanning diffs for AI API keys.

Commands:
    keyscan scan [DIFF]     - Scan a unified diff file (or stdin)
    keyscan pr              - Scan a GitHub pull request and comment on it
    keyscan init            - Create the default config file
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, TextIO

import click

from keyscan import __version__
from keyscan.core.config import CONFIG_PATH, ConfigError, ScanConfig, generate_default_config
from keyscan.core.scanner import ScanResult
from keyscan.integrations.github import (
    GitHubClient,
    GitHubError,
    emit_annotations,
    emit_debug,
    emit_warning,
    get_github_context,
    is_github_actions,
    write_step_summary,
)
from keyscan.reporting.console import ConsoleReporter, _safe_echo
from keyscan.reporting.json_reporter import JSONReporter
from keyscan.reporting.markdown import render_comment
from keyscan.reporting.sarif import SARIFReporter
from keyscan.scanners.keys import scan_diff


@click.group()
@click.version_option(version=__version__, prog_name="KeyScan")
def cli() -> None:
    """
    KeyScan - AI API Key Scanner

    Detect OpenAI, Anthropic and Google AI API keys on the lines added
    by a diff or pull request.
    """
    pass


# ═══════════════════════════════════════════════════════
#  keyscan scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("diff", type=click.File("r", encoding="utf-8", errors="replace"), default="-")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help=f"Path to the config file (default: {CONFIG_PATH}).")
@click.option("--format", "-f", "output_format", type=click.Choice(["console", "json", "sarif"]),
              default="console", help="Output format (default: console).")
@click.option("--output", "-o", "output_file", type=click.Path(), default=None,
              help="Write report to a file.")
@click.option("--ci", is_flag=True, help="Emit GitHub Actions annotations and step summary.")
def scan(
    diff: TextIO,
    config_path: Optional[str],
    output_format: str,
    output_file: Optional[str],
    ci: bool,
) -> None:
    """Scan a unified diff for AI API keys.

    Examples:

        git diff main... | keyscan scan

        keyscan scan changes.patch --format sarif --output keys.sarif
    """
    ci = ci or is_github_actions()
    config = _load_config(config_path, ci)

    result = scan_diff(diff.read(), config, on_debug=emit_debug if ci else None)
    _report_warnings(result.warnings, ci)

    target = getattr(diff, "name", "<stdin>")
    _write_report(result, target, output_format, output_file)

    if ci:
        emit_annotations(result.findings)
        write_step_summary(result.findings)

    if not result.passed:
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  keyscan pr
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--token", envvar="GITHUB_TOKEN", required=True,
              help="GitHub token (default: $GITHUB_TOKEN).")
@click.option("--config-path", type=click.Path(), default=CONFIG_PATH,
              help="Path to the config file.")
@click.option("--repo", default=None, help="owner/name (default: $GITHUB_REPOSITORY).")
@click.option("--pr", "pr_number", type=int, default=None,
              help="Pull request number (default: from the event payload).")
@click.option("--no-comment", is_flag=True, help="Do not post a comment on the pull request.")
def pr(
    token: str,
    config_path: str,
    repo: Optional[str],
    pr_number: Optional[int],
    no_comment: bool,
) -> None:
    """Scan a GitHub pull request and report the keys it adds."""
    context = get_github_context()
    ci = is_github_actions()

    if pr_number is None and context["event_name"] != "pull_request":
        _safe_echo("  This action only works on pull_request events")
        return

    number = pr_number or context["pr_number"]
    if not number:
        _fail("Could not determine PR number")

    full_name = repo or context["repository"]
    if full_name.count("/") != 1:
        _fail(f"Invalid repository '{full_name}', expected owner/name")
    owner, name = full_name.split("/")

    _safe_echo("  Loading configuration...")
    config = _load_config(config_path, ci)

    client = GitHubClient(token, api_url=context["api_url"])
    try:
        _safe_echo("  Fetching PR diff...")
        diff_text, fetch_warnings = client.get_pull_request_diff(owner, name, number)
        _report_warnings(fetch_warnings, ci)

        result = scan_diff(diff_text, config, on_debug=emit_debug if ci else None)
        _report_warnings(result.warnings, ci)

        if ci:
            emit_annotations(result.findings)

        if not no_comment:
            _safe_echo("  Creating PR comment...")
            client.create_comment(owner, name, number, render_comment(result.findings))
    except GitHubError as exc:
        _fail(str(exc))

    ConsoleReporter(target=f"{full_name}#{number}").report(result)
    if ci:
        write_step_summary(result.findings)

    if not result.passed:
        _safe_echo(
            click.style(
                f"  Found {len(result.findings)} AI API key(s) in the PR. "
                "Please remove them and rotate the keys.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  keyscan init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(), default=".",
              help="Repository root to create the config file in.")
def init(target_path: str) -> None:
    """Create the default .github/ai-key-scanner.yml."""
    config_file = Path(target_path).resolve() / CONFIG_PATH

    if config_file.exists():
        _safe_echo(click.style(f"  [!] {config_file} already exists, skipping.", fg="yellow"))
        return

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(generate_default_config(), encoding="utf-8")
    _safe_echo(click.style(f"  [+] Created {config_file}", fg="green"))


# ── Helpers ──

def _load_config(config_path: Optional[str], ci: bool) -> ScanConfig:
    try:
        return ScanConfig.load(Path(config_path) if config_path else None)
    except ConfigError as exc:
        _report_warnings([str(exc)], ci)
        return ScanConfig()


def _report_warnings(warnings: list[str], ci: bool) -> None:
    for warning in warnings:
        if ci:
            emit_warning(warning)
        else:
            _safe_echo(click.style(f"  [!] {warning}", fg="yellow"), err=True)


def _write_report(
    result: ScanResult,
    target: str,
    output_format: str,
    output_file: Optional[str],
) -> None:
    if output_format == "json":
        json_str = JSONReporter(target=target).report(result, output_file=output_file)
        if not output_file:
            _safe_echo(json_str)
    elif output_format == "sarif":
        sarif_str = SARIFReporter(target=target).report(result, output_file=output_file)
        if not output_file:
            _safe_echo(sarif_str)
    else:
        ConsoleReporter(target=target).report(result)
        if output_file:
            JSONReporter(target=target).report(result, output_file=output_file)


def _fail(message: str) -> None:
    _safe_echo(click.style(f"  [X] {message}", fg="red"), err=True)
    sys.exit(2)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
