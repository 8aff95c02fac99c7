"""
Rich terminal output utilities for the contractfix CLI.

Findings, rule tables and diffs are rendered with rich; plain mode prints the
same content without markup or colors.
"""

import json
from typing import Any, Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..analysis.models import Finding, Severity

_SEVERITY_STYLES = {
    Severity.INFO: "blue",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class RichOutputManager:
    """Manages rich terminal output with a plain-text mode."""

    def __init__(self, use_rich: bool = True):
        self.use_rich = use_rich
        if use_rich:
            self.console = Console()
        else:
            self.console = Console(no_color=True, highlight=False, markup=False, soft_wrap=True)

    def print_header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a formatted header."""
        if self.use_rich:
            if subtitle:
                header_text = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
            else:
                header_text = f"[bold blue]{title}[/bold blue]"

            self.console.print(Panel(header_text, border_style="blue", padding=(1, 2)))
        else:
            self.console.print(f"\n=== {title} ===")
            if subtitle:
                self.console.print(subtitle)
            self.console.print()

    def print_section(self, title: str) -> None:
        """Print a section separator."""
        if self.use_rich:
            self.console.rule(f"[bold]{title}[/bold]", style="blue")
        else:
            self.console.print(f"\n--- {title} ---")

    def print_success(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[green]✓[/green] {escape(message)}")
        else:
            self.console.print(f"✓ {message}")

    def print_warning(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")
        else:
            self.console.print(f"⚠ {message}")

    def print_error(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[red]✗[/red] {escape(message)}")
        else:
            self.console.print(f"✗ {message}")

    def print_info(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[blue]ℹ[/blue] {escape(message)}")
        else:
            self.console.print(f"ℹ {message}")

    def print_table(self, title: str, columns: List[str], rows: Iterable[Iterable[Any]]) -> None:
        """Print rows as a table (a pipe-separated listing in plain mode)."""
        rows = [[str(v) for v in row] for row in rows]
        if self.use_rich:
            table = Table(title=title, show_header=True, header_style="bold blue")
            for column in columns:
                table.add_column(column)
            for row in rows:
                table.add_row(*[escape(v) for v in row])
            self.console.print(table)
            return

        self.console.print(f"\n{title}")
        self.console.print("-" * len(title))
        header = " | ".join(columns)
        self.console.print(header)
        self.console.print("-" * len(header))
        for row in rows:
            self.console.print(" | ".join(row))

    def print_findings(self, findings: List[Finding]) -> None:
        """Print findings as ``path:line:col RULE message`` lines."""
        for finding in findings:
            location = f"{finding.path}:{finding.line}:{finding.column + 1}"
            fix_marker = " (fixable)" if finding.fixable else ""
            if self.use_rich:
                style = _SEVERITY_STYLES[finding.severity]
                self.console.print(
                    f"[dim]{escape(location)}[/dim] [{style}]{finding.rule_id}[/{style}] "
                    f"{escape(finding.message)}[dim]{fix_marker}[/dim]",
                    highlight=False,
                )
            else:
                self.console.print(f"{location} {finding.rule_id} {finding.message}{fix_marker}")

    def print_diff(self, diff: str) -> None:
        if self.use_rich:
            self.console.print(Syntax(diff, "diff", theme="monokai"))
        else:
            self.console.print(diff, end="")

    def print_json(self, data: Any) -> None:
        """Print JSON without decoration, suitable for piping."""
        print(json.dumps(data, indent=2, default=str))


# Global instance
rich_output = RichOutputManager()


def set_rich_enabled(enabled: bool) -> None:
    """Enable or disable rich output globally."""
    global rich_output
    rich_output = RichOutputManager(use_rich=enabled)


def get_rich_output() -> RichOutputManager:
    """Get the global rich output manager."""
    return rich_output
