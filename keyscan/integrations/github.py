"""
KeyScan GitHub Integration

Provides helpers for running KeyScan on pull requests:
- REST client for PR files and PR comments
- GitHub Actions annotations and workflow messages
- Step summary output
- Environment detection
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

import requests

from keyscan.core.finding import Finding, group_by_file

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100
REQUEST_TIMEOUT = 30


class GitHubError(RuntimeError):
    """Raised when the GitHub API returns an error or cannot be reached."""


class GitHubClient:
    """Thin client for the pull request endpoints KeyScan needs."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.api_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            raise GitHubError(f"GitHub API request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise GitHubError(f"GitHub API {resp.status_code}: {resp.text[:200]}")
        return resp.json()

    def list_pull_request_files(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Fetch every changed file of a pull request, following pagination."""
        files: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._request(
                "GET",
                f"/repos/{owner}/{repo}/pulls/{number}/files",
                params={"per_page": PER_PAGE, "page": page},
            )
            files.extend(batch)
            if len(batch) < PER_PAGE:
                break
            page += 1
        return files

    def get_pull_request_diff(self, owner: str, repo: str, number: int) -> tuple[str, list[str]]:
        """
        Build a unified diff of the pull request from its per-file patches.

        Returns:
            The diff text and a warning for every file GitHub returned
            without a patch (binary or too large), which is left out.
        """
        chunks: list[str] = []
        warnings: list[str] = []
        for entry in self.list_pull_request_files(owner, repo, number):
            filename = entry.get("filename", "")
            patch = entry.get("patch")
            if not patch:
                warnings.append(f"File {filename} has no patch (likely too large), skipping")
                continue
            chunks.append(f"--- a/{filename}\n+++ b/{filename}\n{patch}\n")
        return "".join(chunks), warnings

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            json={"body": body},
        )


def is_github_actions() -> bool:
    """Check if currently running inside GitHub Actions."""
    return os.environ.get("GITHUB_ACTIONS") == "true"


def get_github_context() -> dict[str, Any]:
    """Get the GitHub Actions context needed to scan a pull request."""
    context: dict[str, Any] = {
        "repository": os.environ.get("GITHUB_REPOSITORY", ""),
        "event_name": os.environ.get("GITHUB_EVENT_NAME", ""),
        "api_url": os.environ.get("GITHUB_API_URL", DEFAULT_API_URL),
        "pr_number": None,
    }

    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if event_path and Path(event_path).is_file():
        try:
            payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            payload = {}
        pull_request = payload.get("pull_request") or {}
        context["pr_number"] = pull_request.get("number")

    return context


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def workflow_command(command: str, message: str, **properties: Any) -> str:
    """Format a GitHub Actions workflow command line."""
    params = ",".join(
        f"{key}={_escape_property(str(value))}" for key, value in properties.items()
    )
    head = f"::{command} {params}" if params else f"::{command}"
    return f"{head}::{_escape_data(message)}"


def emit_warning(message: str) -> None:
    print(workflow_command("warning", message))


def emit_debug(message: str) -> None:
    print(workflow_command("debug", message))


def emit_annotations(findings: list[Finding]) -> None:
    """
    Emit an error annotation for each finding.
    GitHub shows these inline on the pull request's changed lines.
    """
    for finding in findings:
        print(
            workflow_command(
                "error",
                f"Found {finding.key_type} in {finding.file} at line {finding.line}",
                file=finding.file,
                line=finding.line,
                endLine=finding.line,
                title=finding.title,
            )
        )


def write_step_summary(findings: list[Finding]) -> None:
    """
    Write a summary to the GitHub Actions step summary.
    This appears on the workflow run page.
    """
    summary_file = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        return

    lines = ["## 🔒 AI API Key Scanner Results", ""]
    if not findings:
        lines.append("### ✅ PASSED")
        lines.append("No AI API keys detected.")
    else:
        lines.append("### ❌ FAILED")
        lines.append("")
        lines.append("| File | Line | Key Type |")
        lines.append("|------|------|----------|")
        for file, file_findings in group_by_file(findings).items():
            for f in file_findings:
                lines.append(f"| `{file}` | {f.line} | {f.key_type} |")

    try:
        with open(summary_file, "a", encoding="utf-8") as fh:
            fh.write("\n".join(lines) + "\n")
    except OSError:
        pass
