"""
KeyScan Finding Model

A Finding represents one API key detected on an added line of a diff.
Only a redacted fragment of the key is ever kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

REDACTED_LENGTH = 20
TRUNCATION_MARKER = "..."


def redact(text: str) -> str:
    """Keep only the first few characters of a matched key."""
    return text[:REDACTED_LENGTH] + TRUNCATION_MARKER


@dataclass(frozen=True)
class Finding:
    file: str
    line: int
    key_type: str
    match: str
    rule_id: str = ""

    @property
    def title(self) -> str:
        return f"{self.key_type} detected"

    def display(self) -> str:
        """Human-readable output for console printing."""
        return f"{self.file}:{self.line}  {self.key_type} ({self.match})"

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to a dictionary for JSON serialization."""
        return {
            "rule_id": self.rule_id,
            "file": self.file,
            "line": self.line,
            "key_type": self.key_type,
            "match": self.match,
        }


def group_by_file(findings: Iterable[Finding]) -> dict[str, list[Finding]]:
    """Group findings by file, keeping first-seen file order."""
    grouped: dict[str, list[Finding]] = {}
    for finding in findings:
        grouped.setdefault(finding.file, []).append(finding)
    return grouped
