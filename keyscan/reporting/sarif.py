"""
KeyScan SARIF Reporter

Generates SARIF 2.1.0 output so findings can be uploaded to GitHub Code
Scanning. Every key category becomes one rule.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from keyscan import __version__
from keyscan.core.scanner import ScanResult
from keyscan.scanners.keys import KEY_PATTERNS

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"

RULE_HELP = "Remove the key from the change and rotate it with the provider."


class SARIFReporter:
    """Generates SARIF 2.1.0-formatted scan reports."""

    def __init__(self, target: str) -> None:
        self.target = target

    def report(self, result: ScanResult, output_file: Optional[str] = None) -> str:
        """
        Generate SARIF report.

        Args:
            result: The scan result.
            output_file: Optional file path to write the report to.

        Returns:
            The SARIF JSON string.
        """
        rules = [
            {
                "id": rule.key,
                "name": rule.name.replace(" ", ""),
                "shortDescription": {"text": f"{rule.name} detected"},
                "defaultConfiguration": {"level": "error"},
                "help": {"text": RULE_HELP},
                "properties": {"security-severity": "9.0", "tags": ["security", "secret"]},
            }
            for rule in KEY_PATTERNS
        ]
        rule_index = {rule["id"]: idx for idx, rule in enumerate(rules)}

        results = []
        for finding in result.findings:
            results.append(
                {
                    "ruleId": finding.rule_id,
                    "ruleIndex": rule_index.get(finding.rule_id, 0),
                    "level": "error",
                    "message": {"text": f"{finding.title} ({finding.match})"},
                    "locations": [
                        {
                            "physicalLocation": {
                                "artifactLocation": {
                                    "uri": finding.file.replace("\\", "/"),
                                    "uriBaseId": "%SRCROOT%",
                                },
                                "region": {"startLine": max(1, finding.line)},
                            }
                        }
                    ],
                }
            )

        sarif = {
            "$schema": SARIF_SCHEMA,
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "KeyScan",
                            "version": __version__,
                            "rules": rules,
                        }
                    },
                    "results": results,
                }
            ],
        }

        sarif_str = json.dumps(sarif, indent=2)

        if output_file:
            Path(output_file).write_text(sarif_str, encoding="utf-8")

        return sarif_str
