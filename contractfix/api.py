"""
Main API interface for contractfix

Provides a single facade over indexing, rule execution and fixing, so that
callers do not have to wire the index, the engine and the configuration
together themselves.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .cancellation import CancellationToken
from .config import ContractFixConfig
from .engine import ContractFixEngine, EngineReport, write_changes
from .errors import ContractFixError
from .symbols.project_index import ProjectIndex

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Standardized analysis result structure."""

    success: bool
    findings: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FixResult:
    """Standardized fix result structure."""

    success: bool
    edits_applied: int = 0
    diffs: Dict[str, str] = field(default_factory=dict)
    written_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class ContractFix:
    """
    Main API class for contractfix.

    Example:
        >>> result = ContractFix().analyze("src/")
        >>> for finding in result.findings:
        ...     print(finding["rule_id"], finding["message"])
    """

    def __init__(
        self,
        config: Optional[ContractFixConfig] = None,
        token: Optional[CancellationToken] = None,
    ):
        self.config = config or ContractFixConfig.default()
        self.token = token

    def build_index(self, path: Union[str, Path]) -> ProjectIndex:
        path = Path(path)
        if not path.exists():
            raise ContractFixError(f"Path does not exist: {path}")
        return ProjectIndex.from_path(path, self.config)

    def _run(self, path: Union[str, Path], rule_ids: Optional[Iterable[str]], fix: bool) -> EngineReport:
        index = self.build_index(path)
        engine = ContractFixEngine(index, self.config, rule_ids, self.token)
        return engine.run(fix=fix)

    @staticmethod
    def _warnings(report: EngineReport) -> List[str]:
        return [f"Skipped {path}: {reason}" for path, reason in report.skipped_files.items()]

    def analyze(
        self, path: Union[str, Path], rule_ids: Optional[Iterable[str]] = None
    ) -> AnalysisResult:
        """Analyze a file or directory and report findings."""
        logger.info(f"Starting contract analysis for: {path}")
        try:
            report = self._run(path, rule_ids, fix=False)
        except ContractFixError as e:
            logger.error(f"Analysis failed: {e}")
            return AnalysisResult(False, errors=[str(e)])

        return AnalysisResult(
            success=True,
            findings=[f.to_dict() for f in report.findings],
            warnings=self._warnings(report),
            metadata={
                "files_analyzed": len(report.files),
                "timestamp": datetime.now().isoformat(),
            },
        )

    def fix(
        self,
        path: Union[str, Path],
        rule_ids: Optional[Iterable[str]] = None,
        write: bool = False,
    ) -> FixResult:
        """
        Compute fixes for a file or directory.

        Args:
            path: File or directory to fix.
            rule_ids: Rules to run; defaults to the enabled rules.
            write: Write the fixed sources back (with backups if enabled).

        Returns:
            FixResult with unified diffs per changed file.
        """
        logger.info(f"Starting contract fixes for: {path} (write={write})")
        try:
            report = self._run(path, rule_ids, fix=True)
            written = write_changes(report, self.config) if write else []
        except (ContractFixError, OSError) as e:
            logger.error(f"Fix failed: {e}")
            return FixResult(False, errors=[str(e)])

        return FixResult(
            success=True,
            edits_applied=sum(r.applied_edits for r in report.files),
            diffs={r.path: r.diff() for r in report.changed_files},
            written_files=written,
            warnings=self._warnings(report),
            metadata={
                "files_analyzed": len(report.files),
                "findings": len(report.findings),
                "timestamp": datetime.now().isoformat(),
            },
        )
