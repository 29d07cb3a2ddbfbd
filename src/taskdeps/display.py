"""Rendering helpers for findings, repair results and task trees.

The graph core only produces plain data; these helpers turn it into rich
renderables or plain text for terminal output.
"""

from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from taskdeps.constants import STATUS_ICONS, truncate
from taskdeps.graph.findings import Finding
from taskdeps.graph.model import TaskDocument
from taskdeps.graph.repair import RepairResult


def findings_table(findings: list[Finding]) -> Table:
    """Build a table with one row per finding."""
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Kind", style="bold yellow", no_wrap=True)
    table.add_column("Details")

    for finding in findings:
        table.add_row(finding.kind.value.replace("_", " "), finding.message)
    return table


def findings_panel(findings: list[Finding]) -> Panel:
    if not findings:
        return Panel("All dependencies are valid", title="[bold]Dependencies[/bold]", border_style="green")
    return Panel(
        findings_table(findings),
        title=f"[bold]{len(findings)} dependency issues[/bold]",
        border_style="yellow",
    )


def repair_panel(result: RepairResult) -> Panel:
    """Summarize a repair: applied changes first, then flagged findings."""
    parts: list = []
    if result.changes:
        changes = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
        changes.add_column("Change")
        for entry in result.changes:
            changes.add_row(f"[green]✓[/green] {entry.message}")
        parts.append(changes)
    else:
        parts.append("No dependency issues found")

    if result.flagged:
        parts.append("")
        parts.append("[bold yellow]Flagged (not changed):[/bold yellow]")
        parts.append(findings_table(list(result.flagged)))

    border = "green" if not result.flagged else "yellow"
    return Panel(Group(*parts), title="[bold]Dependency repair[/bold]", border_style=border)


def to_display(document: TaskDocument, max_title_len: int = 40) -> str:
    """Plain-text tree of tasks and subtasks with status icons and dependencies."""
    if not document.tasks:
        return "No tasks."

    lines = []
    for node in document.nodes():
        node_id = node.node_id
        icon = STATUS_ICONS.get(node.status, "?")
        prefix = "  " if node_id.is_subtask else ""
        deps = [str(dep) for dep in document.dependencies_of(node_id)]
        dep_info = f" (depends on: {', '.join(deps)})" if deps else ""
        lines.append(f"{prefix}{icon} {node_id} {truncate(node.title, max_title_len)}{dep_info}")
    return "\n".join(lines)
