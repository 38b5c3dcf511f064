"""
Terminal reports for recommendation and decomposition results.

Builds Rich renderables; printing is left to the caller's console.
"""

from __future__ import annotations

from typing import List, Sequence

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .models import (
    DecompositionResult,
    RecommendationResult,
    SubtaskCategory,
    TaskBreakdown,
    TeamMemberWorkload,
)


def _score_style(score: float) -> str:
    if score >= 0.7:
        return "green"
    if score >= 0.4:
        return "yellow"
    return "red"


def _utilization_style(utilization: float) -> str:
    if utilization > 0.9:
        return "red"
    if utilization > 0.7:
        return "yellow"
    return "green"


def render_workload_table(workloads: Sequence[TeamMemberWorkload]) -> Panel:
    """Team capacity overview."""
    if not workloads:
        return Panel(
            Text("No team members found", style="dim"),
            title="[bold]Team Workload[/bold]",
            border_style="cyan",
        )

    table = Table(show_header=True, header_style="bold magenta", box=None)
    table.add_column("Member", style="cyan")
    table.add_column("Load", justify="right")
    table.add_column("Utilization", justify="right")
    table.add_column("Availability", justify="right")
    table.add_column("Skills", style="dim")

    for member in workloads:
        utilization = member.utilization
        table.add_row(
            member.username,
            f"{member.current_workload}/{member.max_capacity}",
            Text(f"{utilization:.0%}", style=_utilization_style(utilization)),
            f"{member.availability_score:.2f}",
            ", ".join(member.skill_areas) or "-",
        )

    return Panel(table, title="[bold]Team Workload[/bold]", border_style="cyan")


def render_recommendations(result: RecommendationResult) -> Group:
    """Ranked recommendations with score breakdown, reasoning and insights."""
    parts: List = [render_workload_table(result.team_workloads)]

    if result.is_empty:
        parts.append(
            Panel(
                Text(result.message or "No recommendations", style="yellow"),
                title="[bold]Recommendations[/bold]",
                border_style="yellow",
            )
        )
        return Group(*parts)

    table = Table(
        title=f"Top {len(result.recommendations)} of {result.analyzed_count} analyzed items",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", justify="right", width=3)
    table.add_column("Item", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Pri", justify="right")
    table.add_column("Urg", justify="right")
    table.add_column("Avail", justify="right")
    table.add_column("Skill", justify="right")
    table.add_column("Ready", justify="right")
    table.add_column("Pts", justify="right")
    table.add_column("Reasoning", style="dim")

    for rank, score in enumerate(result.recommendations, start=1):
        item_text = Text(f"#{score.number} {score.title}")
        if score.blockers:
            item_text.append(f"\n⚠ {'; '.join(score.blockers)}", style="red")
        table.add_row(
            str(rank),
            item_text,
            Text(f"{score.total_score:.0%}", style=_score_style(score.total_score)),
            f"{score.priority_score:.2f}",
            f"{score.urgency_score:.2f}",
            f"{score.availability_score:.2f}",
            f"{score.skill_match_score:.2f}",
            f"{score.readiness_score:.2f}",
            str(score.complexity),
            score.reasoning,
        )
    parts.append(table)

    insights = result.insights()
    if insights:
        parts.append(
            Panel(
                "\n".join(f"• {insight}" for insight in insights),
                title="[bold]Insights[/bold]",
                border_style="green",
            )
        )

    return Group(*parts)


def _summary_table(breakdown: TaskBreakdown) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    distribution = ", ".join(
        f"{points} pts x{count}" for points, count in breakdown.complexity_distribution().items()
    )
    table.add_row("Template", breakdown.template_name)
    table.add_row("Original complexity", f"{breakdown.original_complexity} story points")
    table.add_row("Total complexity", f"{breakdown.total_complexity} story points")
    table.add_row("Subtasks", str(len(breakdown.subtasks)))
    table.add_row("Distribution", distribution or "-")
    table.add_row("Critical path", f"{breakdown.critical_path_depth} subtasks")
    table.add_row("Timeline", breakdown.timeline)
    table.add_row("Approach", breakdown.recommended_approach)
    return table


def _subtask_tree(breakdown: TaskBreakdown) -> Tree:
    tree = Tree("[bold]Subtasks by category[/bold]")
    for category in SubtaskCategory:
        tasks = [task for task in breakdown.subtasks if task.category is category]
        if not tasks:
            continue
        branch = tree.add(f"[cyan]{category.value}[/cyan]")
        for task in tasks:
            node = branch.add(
                f"{task.title} [dim]({task.complexity} pts, {task.estimated_hours}h, "
                f"{task.priority.value})[/dim]"
            )
            node.add(Text(task.description, style="dim"))
            if task.dependencies:
                node.add(f"Depends on: {', '.join(task.dependencies)}")
            node.add(f"Labels: {', '.join(task.labels)}")
    return tree


def _phase_table(breakdown: TaskBreakdown) -> Table:
    table = Table(show_header=True, header_style="bold magenta", box=None)
    table.add_column("Phase", style="cyan")
    table.add_column("Subtasks")

    for index, titles in enumerate(breakdown.phases.titles().values(), start=1):
        table.add_row(f"Phase {index}", "\n".join(titles) or "-")
    return table


def render_breakdown(result: DecompositionResult) -> Group:
    """Breakdown summary, risks, subtasks, dependency chain and phased plan."""
    item = result.item
    header = Text()
    header.append(f" #{item.number} ", style="bold white on blue")
    header.append(f" {item.title}", style="bold")

    parts: List = [Panel(header, border_style="blue")]

    if result.advisory:
        parts.append(
            Panel(Text(result.advisory, style="yellow"), title="Advisory", border_style="yellow")
        )

    breakdown = result.breakdown
    if breakdown is None or not breakdown.subtasks:
        return Group(*parts)

    parts.append(
        Panel(_summary_table(breakdown), title="[bold]Summary[/bold]", border_style="green")
    )

    if breakdown.risk_assessment:
        parts.append(
            Panel(
                "\n".join(f"• {risk}" for risk in breakdown.risk_assessment),
                title="[bold]Risks[/bold]",
                border_style="red",
            )
        )

    parts.append(_subtask_tree(breakdown))

    if breakdown.dependencies:
        chain = Table(show_header=True, header_style="bold magenta", box=None)
        chain.add_column("Subtask", style="cyan")
        chain.add_column("Depends on")
        for title, deps in breakdown.dependencies.items():
            chain.add_row(title, ", ".join(deps))
        parts.append(Panel(chain, title="[bold]Dependencies[/bold]", border_style="cyan"))

    parts.append(
        Panel(_phase_table(breakdown), title="[bold]Implementation Plan[/bold]", border_style="cyan")
    )

    return Group(*parts)
