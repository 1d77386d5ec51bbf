"""
KeyScan API Key Scanner

Detects AI provider API keys on the added lines of a diff.
Each pattern is applied on its own, so a key shaped like more than one
provider's produces one finding per provider.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from keyscan.core.config import ScanConfig
from keyscan.core.diff import ReconstructedFile, parse_diff
from keyscan.core.finding import Finding, redact
from keyscan.core.scanner import BaseScanner, ScanResult


@dataclass(frozen=True)
class PatternRule:
    key: str
    name: str
    pattern: re.Pattern


# Declaration order is the order findings on one line are reported in.
KEY_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        "openai", "OpenAI API Key",
        re.compile(r"\bsk-(?:proj-)?[A-Za-z0-9_-]{20,}\b", re.ASCII),
    ),
    PatternRule(
        "anthropic", "Anthropic API Key",
        re.compile(r"\bsk-ant-[A-Za-z0-9_-]{20,}\b", re.ASCII),
    ),
    PatternRule(
        "google", "Google AI API Key",
        re.compile(r"\bAIza[0-9A-Za-z_-]{35}\b", re.ASCII),
    ),
)


class KeyScanner(BaseScanner):
    """
    Scans reconstructed diff content for AI provider API keys.

    Files whose path contains any configured ignore string are skipped.
    Matches satisfying any allowlist regex are dropped. An allowlist entry
    that is not a valid regex is reported once as a warning and never
    matches.
    """

    name = "keys"

    def __init__(
        self,
        files: Mapping[str, ReconstructedFile],
        config: Optional[ScanConfig] = None,
        patterns: tuple[PatternRule, ...] = KEY_PATTERNS,
        on_debug: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(files, config)
        self.patterns = patterns
        self.warnings: List[str] = []
        self._on_debug = on_debug
        self._allowlist = self._compile_allowlist(self.config.allowlist_regex)

    def _compile_allowlist(self, expressions: list[str]) -> list[re.Pattern]:
        compiled = []
        for expression in expressions:
            try:
                compiled.append(re.compile(expression))
            except re.error as exc:
                self.warnings.append(f"Invalid allowlist regex: {expression} - {exc}")
        return compiled

    def _debug(self, message: str) -> None:
        if self._on_debug is not None:
            self._on_debug(message)

    def should_ignore_path(self, path: str) -> bool:
        return any(ignored in path for ignored in self.config.ignore_paths)

    def matches_allowlist(self, text: str) -> bool:
        return any(regex.search(text) for regex in self._allowlist)

    def scan(self) -> ScanResult:
        result = ScanResult(warnings=list(self.warnings))

        for path, reconstructed in self.files.items():
            if self.should_ignore_path(path):
                self._debug(f"Ignoring {path} (matches ignorePaths)")
                result.files_ignored += 1
                continue
            result.files_scanned += 1
            result.findings.extend(self.scan_file(reconstructed))

        return result

    def scan_file(self, reconstructed: ReconstructedFile) -> List[Finding]:
        """Scan one file's added content, line by line."""
        findings: List[Finding] = []

        for index, line in enumerate(reconstructed.lines()):
            line_no = reconstructed.line_number(index)

            for rule in self.patterns:
                for match in rule.pattern.finditer(line):
                    text = match.group(0)
                    if self.matches_allowlist(text):
                        self._debug(
                            f"Key in {reconstructed.path}:{line_no} matches allowlist, skipping"
                        )
                        continue

                    findings.append(
                        Finding(
                            file=reconstructed.path,
                            line=line_no,
                            key_type=rule.name,
                            match=redact(text),
                            rule_id=rule.key,
                        )
                    )

        return findings


def scan_diff(
    diff_text: str,
    config: Optional[ScanConfig] = None,
    on_debug: Optional[Callable[[str], None]] = None,
) -> ScanResult:
    """Parse a unified diff and scan its added lines."""
    files = parse_diff(diff_text)
    return KeyScanner(files, config, on_debug=on_debug).scan()
