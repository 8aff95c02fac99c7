"""
CLI command handlers.

Each handler takes the parsed arguments and the loaded configuration and
returns the process exit code.
"""

import logging
import os
from pathlib import Path

from ..config import ContractFixConfig
from ..engine import ContractFixEngine, write_changes
from ..errors import ContractFixError
from ..rules import RULES
from ..symbols.project_index import ProjectIndex
from .rich_output import get_rich_output

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _run_engine(args, config: ContractFixConfig, fix: bool):
    path = Path(args.path)
    if not path.exists():
        raise ContractFixError(f"Path does not exist: {path}")
    index = ProjectIndex.from_path(path, config)
    engine = ContractFixEngine(index, config, args.rules)
    return engine.run(fix=fix)


def _report_skipped(report) -> None:
    output = get_rich_output()
    for path, reason in report.skipped_files.items():
        output.print_warning(f"Skipped {path}: {reason}")


def cmd_analyze(args, config: ContractFixConfig) -> int:
    """Handle analyze command."""
    report = _run_engine(args, config, fix=False)
    output = get_rich_output()

    if args.format == "json":
        output.print_json(report.to_dict())
    else:
        output.print_header("Contract analysis", str(args.path))
        _report_skipped(report)
        findings = report.findings
        if findings:
            output.print_findings(findings)
            fixable = sum(1 for f in findings if f.fixable)
            output.print_info(f"{len(findings)} finding(s), {fixable} fixable")
        else:
            output.print_success("No findings")

    if args.fail_on_findings and report.findings:
        return EXIT_FINDINGS
    return EXIT_OK


def cmd_fix(args, config: ContractFixConfig) -> int:
    """Handle fix command."""
    if args.no_backup:
        config.refactoring_settings.backup_enabled = False

    report = _run_engine(args, config, fix=True)
    output = get_rich_output()
    _report_skipped(report)

    changed = report.changed_files
    if not changed:
        output.print_success("Nothing to fix")
        return EXIT_OK

    if not args.write:
        for file_report in changed:
            output.print_diff(file_report.diff())
        output.print_info(f"{len(changed)} file(s) would change; rerun with --write to apply")
        return EXIT_OK

    written = write_changes(report, config)
    for path in written:
        output.print_success(f"Fixed {path}")
    skipped = sum(r.skipped_edits for r in changed)
    if skipped:
        output.print_warning(f"{skipped} overlapping edit(s) skipped; run fix again to apply them")
    return EXIT_OK


def cmd_rules(args, config: ContractFixConfig) -> int:
    """Handle rules command."""
    enabled = set(config.analysis_settings.enabled_rules)
    rows = [
        (rule_id, "yes" if rule_id in enabled else "no", rule.title, rule.description)
        for rule_id, rule in RULES.items()
    ]
    get_rich_output().print_table("Rules", ["ID", "Enabled", "Title", "Description"], rows)
    return EXIT_OK


def cmd_config(args, config: ContractFixConfig) -> int:
    """Handle config command."""
    output = get_rich_output()
    if args.config_action == "show":
        output.print_json(config.to_dict())
        return EXIT_OK

    if args.config_action == "init":
        if os.path.exists(args.output) and not args.force:
            output.print_error(f"{args.output} already exists (use --force to overwrite)")
            return EXIT_ERROR
        ContractFixConfig.default().save(args.output)
        output.print_success(f"Default configuration file created at {args.output}")
        return EXIT_OK

    output.print_error(f"Unknown config action: {args.config_action}")
    return EXIT_ERROR
