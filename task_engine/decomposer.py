"""Task Decomposer: template-driven breakdown of large work items."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from .complexity import MAX_COMPLEXITY, MIN_COMPLEXITY, analyze_complexity
from .config_loader import DecompositionConfig, EngineConfig, create_default_config
from .context import ItemContext, analyze_item_context
from .dependency_graph import (
    build_dependency_graph,
    critical_path_depth,
    estimate_timeline,
    schedule_phases,
    validate_dependency_graph,
)
from .exceptions import InvalidArgumentError
from .logging_config import LogContext
from .models import DecompositionResult, SubTask, TaskBreakdown, WorkItem
from .recommender import find_item
from .templates import DecompositionTemplate, select_template

logger = structlog.get_logger()

HIGH_TOTAL_COMPLEXITY = 15
MANY_DEPENDENCIES = 2
SINGLE_ASSIGNEE_COMPLEXITY = 8


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def generate_subtasks(
    template: DecompositionTemplate,
    context: ItemContext,
    original_complexity: int,
    max_subtasks: int = 8,
    min_complexity: int = 1,
    item_title: str | None = None,
    inflation_ceiling: float = 1.3,
    rescale_target: float = 1.1,
) -> list[SubTask]:
    """
    Instantiate a template into concrete subtasks.

    Subtasks are truncated to ``max_subtasks`` and filtered by the
    complexity floor. Dependencies on dropped subtasks are removed. When
    the summed complexity exceeds ``inflation_ceiling`` times the
    original, every subtask is rescaled towards ``rescale_target`` times
    the original (never below 1 point each). Descriptions are filled in
    with ``item_title``, or the context title when it is omitted.

    Returns:
        Subtasks whose total complexity stays within the ceiling
    """
    subtasks = template.instantiate(context, item_title or context.title)[:max_subtasks]
    subtasks = [task for task in subtasks if task.complexity >= min_complexity]

    kept = {task.title for task in subtasks}
    for task in subtasks:
        task.dependencies = [dep for dep in task.dependencies if dep in kept]

    ceiling = original_complexity * inflation_ceiling
    total = sum(task.complexity for task in subtasks)
    if total > ceiling:
        factor = (original_complexity * rescale_target) / total
        for task in subtasks:
            task.complexity = min(
                MAX_COMPLEXITY,
                max(MIN_COMPLEXITY, _round_half_up(task.complexity * factor)),
            )
        logger.debug(
            "subtasks_rescaled",
            original_total=total,
            rescaled_total=sum(task.complexity for task in subtasks),
            factor=round(factor, 3),
        )
        subtasks = _enforce_ceiling(subtasks, ceiling)

    return subtasks


def _enforce_ceiling(subtasks: list[SubTask], ceiling: float) -> list[SubTask]:
    """
    Trim rounding overshoot left after rescaling.

    Points are taken from the largest subtasks first. If every subtask is
    already at 1 point, trailing subtasks are dropped; the templates
    chain each step onto the previous one, so the kept prefix stays
    self-contained.
    """
    while sum(task.complexity for task in subtasks) > ceiling:
        largest = max(subtasks, key=lambda task: task.complexity)
        if largest.complexity > MIN_COMPLEXITY:
            largest.complexity -= 1
            continue
        dropped = subtasks.pop()
        logger.warning("subtask_dropped_over_ceiling", subtask=dropped.title)
        for task in subtasks:
            task.dependencies = [dep for dep in task.dependencies if dep != dropped.title]
    return subtasks


def recommend_approach(template: DecompositionTemplate, context: ItemContext) -> str:
    """Describe how to tackle the breakdown."""
    approach = template.approach

    if context.has_api_integration:
        approach += ". Include API contract testing and mocking."

    if context.has_security_requirements:
        approach += " Pay special attention to security testing and code review."

    if context.has_performance_requirements:
        approach += " Include performance benchmarking and optimization."

    return approach


def assess_risks(context: ItemContext, subtasks: Sequence[SubTask]) -> list[str]:
    """List delivery risks for the breakdown."""
    risks = []
    total = sum(task.complexity for task in subtasks)

    if total > HIGH_TOTAL_COMPLEXITY:
        risks.append("High total complexity may lead to scope creep or timeline overruns")

    if any(len(task.dependencies) > MANY_DEPENDENCIES for task in subtasks):
        risks.append("Complex dependencies may cause bottlenecks and coordination issues")

    if context.has_api_integration:
        risks.append("API integration may face rate limiting or external service downtime")

    if context.has_data_migration:
        risks.append("Data migration carries risk of data loss or corruption")

    if context.has_security_requirements:
        risks.append("Security implementation requires careful review to avoid vulnerabilities")

    if not context.assignees:
        risks.append("No assignees identified - resource allocation may be unclear")
    elif len(context.assignees) == 1 and total > SINGLE_ASSIGNEE_COMPLEXITY:
        risks.append("Single assignee for complex task may create knowledge silos")

    return risks


class TaskDecomposer:
    """
    Decomposes work items into dependency-ordered subtasks.

    The decomposer classifies an item, instantiates the matching
    template, keeps the summed estimate close to the original, and
    derives a dependency graph, critical path, timeline and phased
    implementation plan. Low-complexity items are not decomposed unless
    forced.

    Example:
        >>> decomposer = TaskDecomposer()
        >>> result = decomposer.decompose(item)
        >>> if result.expanded:
        ...     print(result.breakdown.timeline)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or create_default_config()

    @property
    def settings(self) -> DecompositionConfig:
        """Decomposition section of the configuration."""
        return self.config.decomposition

    def decompose(
        self,
        item: WorkItem,
        template_type: str = "auto",
        max_subtasks: int | None = None,
        min_complexity: int | None = None,
        force: bool = False,
    ) -> DecompositionResult:
        """
        Decompose a work item.

        Args:
            item: Work item to decompose
            template_type: ``"auto"`` or a template name
            max_subtasks: Maximum number of subtasks
            min_complexity: Drop subtasks below this complexity
            force: Decompose even low-complexity items

        Returns:
            DecompositionResult with a breakdown, or an advisory when the
            item is too small or no subtask survived the filters

        Raises:
            InvalidArgumentError: If an option is out of range
            DependencyError: If the generated graph is malformed
        """
        settings = self.settings
        max_subtasks = settings.max_subtasks if max_subtasks is None else max_subtasks
        min_complexity = settings.min_complexity if min_complexity is None else min_complexity

        if max_subtasks < 1:
            raise InvalidArgumentError(
                f"max_subtasks must be at least 1, got {max_subtasks}",
                error_code="INVALID_MAX_SUBTASKS",
            )
        if not MIN_COMPLEXITY <= min_complexity <= MAX_COMPLEXITY:
            raise InvalidArgumentError(
                f"min_complexity must be between {MIN_COMPLEXITY} and {MAX_COMPLEXITY}, "
                f"got {min_complexity}",
                error_code="INVALID_MIN_COMPLEXITY",
            )

        original_complexity = analyze_complexity(item)

        with LogContext(item_number=item.number):
            if original_complexity < settings.low_value_threshold and not force:
                logger.info(
                    "decomposition_skipped",
                    complexity=original_complexity,
                    threshold=settings.low_value_threshold,
                )
                return DecompositionResult(
                    item=item,
                    original_complexity=original_complexity,
                    advisory=(
                        f"Task expansion not recommended: #{item.number} has a complexity of "
                        f"{original_complexity} story points. Tasks below "
                        f"{settings.low_value_threshold} points are usually better kept as a "
                        "single unit of work; add detailed acceptance criteria instead, or "
                        "force the expansion."
                    ),
                )

            breakdown = self._build_breakdown(
                item, original_complexity, template_type, max_subtasks, min_complexity
            )

            logger.info(
                "decomposition_completed",
                template=breakdown.template_name,
                subtasks=len(breakdown.subtasks),
                total_complexity=breakdown.total_complexity,
                original_complexity=original_complexity,
            )

        advisory = None
        if not breakdown.subtasks:
            advisory = (
                f"No subtasks met the minimum complexity of {min_complexity} points; "
                "lower the floor or keep the task as a single unit of work."
            )

        return DecompositionResult(
            item=item,
            original_complexity=original_complexity,
            breakdown=breakdown,
            advisory=advisory,
        )

    def decompose_by_number(
        self,
        items: Sequence[WorkItem],
        number: int | None,
        **options,
    ) -> DecompositionResult:
        """
        Decompose the snapshot item with the given number.

        Raises:
            InvalidArgumentError: If no number was given
            ItemNotFoundError: If the number is absent from the snapshot
        """
        return self.decompose(find_item(items, number), **options)

    def _build_breakdown(
        self,
        item: WorkItem,
        original_complexity: int,
        template_type: str,
        max_subtasks: int,
        min_complexity: int,
    ) -> TaskBreakdown:
        settings = self.settings
        context = analyze_item_context(item)
        template = select_template(item, template_type, context)

        subtasks = generate_subtasks(
            template,
            context,
            original_complexity,
            max_subtasks=max_subtasks,
            min_complexity=min_complexity,
            item_title=item.title,
            inflation_ceiling=settings.inflation_ceiling,
            rescale_target=settings.rescale_target,
        )

        graph = build_dependency_graph(subtasks)
        validate_dependency_graph(subtasks, graph)

        return TaskBreakdown(
            original=item,
            original_complexity=original_complexity,
            template_name=template.name,
            subtasks=subtasks,
            total_complexity=sum(task.complexity for task in subtasks),
            recommended_approach=recommend_approach(template, context),
            risk_assessment=assess_risks(context, subtasks),
            timeline=estimate_timeline(
                subtasks,
                graph,
                hours_per_day=settings.productive_hours_per_day,
                min_efficiency=settings.min_parallel_efficiency,
            ),
            dependencies=graph,
            critical_path_depth=critical_path_depth(subtasks, graph),
            phases=schedule_phases(subtasks, graph),
        )
