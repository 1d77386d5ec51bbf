"""
KeyScan Base Scanner

A scanner inspects the reconstructed added content of a diff and returns
findings. Scanners never fail on bad input: problems are reported as
warnings on the ScanResult.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping, Optional

from keyscan.core.config import ScanConfig
from keyscan.core.diff import ReconstructedFile
from keyscan.core.finding import Finding


@dataclass
class ScanResult:
    findings: list[Finding] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files_scanned: int = 0
    files_ignored: int = 0

    @property
    def passed(self) -> bool:
        return not self.findings


class BaseScanner(ABC):
    """
    Minimal scanner interface.
    Each scanner must implement scan().
    """

    name: str = "base"

    def __init__(
        self,
        files: Mapping[str, ReconstructedFile],
        config: Optional[ScanConfig] = None,
    ):
        self.files = files
        self.config = config or ScanConfig()

    @abstractmethod
    def scan(self) -> ScanResult:
        """
        Run the scan and return findings.
        """
        raise NotImplementedError
