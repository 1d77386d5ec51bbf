"""
KeyScan JSON Reporter

Generates machine-readable JSON output format:
{
    "version": "1.0",
    "summary": {
        "total_findings": N,
        "by_key_type": {"OpenAI API Key": n, ...},
        "files_scanned": n,
        "files_ignored": n
    },
    "findings": [...],
    "warnings": [...]
}
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Optional

from keyscan import __version__
from keyscan.core.scanner import ScanResult


class JSONReporter:
    """Generates JSON-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(self, result: ScanResult, output_file: Optional[str] = None) -> str:
        """
        Generate JSON report.

        Args:
            result: The scan result.
            output_file: Optional file path to write the report to.

        Returns:
            The JSON string.
        """
        report_data = {
            "version": "1.0",
            "tool": {
                "name": "KeyScan",
                "version": __version__,
            },
            "target": self.target,
            "summary": {
                "total_findings": len(result.findings),
                "by_key_type": dict(Counter(f.key_type for f in result.findings)),
                "files_scanned": result.files_scanned,
                "files_ignored": result.files_ignored,
            },
            "findings": [f.to_dict() for f in result.findings],
            "warnings": list(result.warnings),
        }

        json_str = json.dumps(report_data, indent=2)

        if output_file:
            Path(output_file).write_text(json_str, encoding="utf-8")

        return json_str
