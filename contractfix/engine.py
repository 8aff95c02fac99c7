"""
Rule engine: runs the enabled rules over every indexed module and applies
the resulting edits one file at a time.
"""

import difflib
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .analysis.models import Finding
from .cancellation import CancellationToken, check_cancelled
from .config import ContractFixConfig
from .refactoring.cst_transformer import apply_edits
from .rules import ContractRule, RuleContext, create_rules
from .symbols.project_index import ProjectIndex, SourceModule

logger = logging.getLogger(__name__)


@dataclass
class FileReport:
    """Findings for one file and, after fixing, its new source."""

    path: str
    original_source: str
    findings: List[Finding] = field(default_factory=list)
    modified_source: Optional[str] = None
    applied_edits: int = 0
    skipped_edits: int = 0

    @property
    def changed(self) -> bool:
        return self.modified_source is not None and self.modified_source != self.original_source

    def diff(self) -> str:
        """Unified diff between the original and the fixed source."""
        if not self.changed:
            return ""
        return "".join(
            difflib.unified_diff(
                self.original_source.splitlines(True),
                self.modified_source.splitlines(True),
                fromfile=f"a/{self.path}",
                tofile=f"b/{self.path}",
            )
        )

    def sorted_findings(self) -> List[Finding]:
        return sorted(self.findings, key=lambda f: (f.line, f.column, f.rule_id))


@dataclass
class EngineReport:
    files: List[FileReport] = field(default_factory=list)
    skipped_files: Dict[str, str] = field(default_factory=dict)

    @property
    def findings(self) -> List[Finding]:
        return [f for report in self.files for f in report.sorted_findings()]

    @property
    def changed_files(self) -> List[FileReport]:
        return [report for report in self.files if report.changed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "changed_files": [r.path for r in self.changed_files],
            "skipped_files": dict(self.skipped_files),
        }


class ContractFixEngine:
    """Runs rules over a ``ProjectIndex``."""

    def __init__(
        self,
        index: ProjectIndex,
        config: Optional[ContractFixConfig] = None,
        rule_ids: Optional[Iterable[str]] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.index = index
        self.config = config or index.config
        self.rules: List[ContractRule] = create_rules(rule_ids, self.config)
        self.token = token

    def analyze_module(self, source: SourceModule) -> List[Finding]:
        """Findings of all rules for one module, in rule order."""
        context = RuleContext(self.index, source, self.config, self.token)
        findings: List[Finding] = []
        for rule in self.rules:
            check_cancelled(self.token)
            findings.extend(rule.check(context))
        return findings

    def fix_module(self, source: SourceModule, findings: List[Finding]) -> FileReport:
        report = FileReport(source.path, source.source, findings)
        edits = [f.edit for f in findings if f.edit is not None]
        if not edits:
            report.modified_source = source.source
            return report

        result = apply_edits(source.module, edits)
        report.modified_source = result.modified_source
        report.applied_edits = len(result.applied)
        report.skipped_edits = len(result.skipped)
        if result.skipped:
            logger.info(f"{source.path}: {len(result.skipped)} overlapping edit(s) skipped")
        return report

    def run(self, fix: bool = False) -> EngineReport:
        """Analyze every indexed module; with ``fix`` also compute the fixed sources."""
        report = EngineReport(skipped_files=dict(self.index.skipped))
        for source in self.index.modules.values():
            findings = self.analyze_module(source)
            if fix:
                report.files.append(self.fix_module(source, findings))
            else:
                report.files.append(FileReport(source.path, source.source, findings))
        logger.info(
            f"Analyzed {len(report.files)} files with {len(self.rules)} rules: "
            f"{len(report.findings)} findings"
        )
        return report


def write_changes(report: EngineReport, config: Optional[ContractFixConfig] = None) -> List[str]:
    """Write the fixed sources of ``report`` back to disk, returning the written paths."""
    settings = (config or ContractFixConfig.default()).refactoring_settings
    written = []
    for file_report in report.changed_files:
        path = Path(file_report.path)
        if settings.backup_enabled:
            backup_path = path.with_name(path.name + settings.backup_suffix)
            shutil.copy2(path, backup_path)
            logger.info(f"Backup created: {backup_path}")
        path.write_text(file_report.modified_source, encoding="utf-8")
        written.append(str(path))
    return written
