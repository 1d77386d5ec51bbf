"""
KeyScan Pull Request Comment

Renders the Markdown comment posted on the scanned pull request.
"""

from __future__ import annotations

from keyscan.core.finding import Finding, group_by_file


COMMENT_HEADING = "## 🔒 AI API Key Scanner Results"


def render_comment(findings: list[Finding]) -> str:
    lines = [COMMENT_HEADING, ""]

    if not findings:
        lines.append("✅ No AI API keys detected in this PR.")
        return "\n".join(lines) + "\n"

    lines.append(f"⚠️ **{len(findings)} AI API key(s) detected in this PR:**")
    lines.append("")

    for file, file_findings in group_by_file(findings).items():
        lines.append(f"### `{file}`")
        lines.append("")
        for finding in file_findings:
            lines.append(
                f"- Line {finding.line}: {finding.title} ({finding.match})"
            )
        lines.append("")

    lines.append(
        "**Please remove these keys and rotate them immediately if they were committed.**"
    )
    return "\n".join(lines) + "\n"
