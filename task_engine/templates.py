"""Decomposition templates: fixed, ordered subtask blueprints per work type."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .context import ItemContext, analyze_item_context
from .models import SubTask, SubtaskCategory, SubtaskPriority, WorkItem


class TemplateKind(Enum):
    """Work type a template decomposes."""

    FEATURE = "Feature Implementation"
    BUG_FIX = "Bug Fix"
    REFACTORING = "Refactoring"


@dataclass(frozen=True)
class SubtaskBlueprint:
    """
    Template for one subtask.

    ``description`` may contain a ``{title}`` placeholder. When
    ``frontend_label`` is set, the subtask gets ``frontend`` or ``backend``
    appended to its labels depending on the item context.
    """

    title: str
    description: str
    complexity: int
    priority: SubtaskPriority
    category: SubtaskCategory
    estimated_hours: int
    labels: tuple[str, ...]
    acceptance_criteria: tuple[str, ...]
    dependencies: tuple[str, ...] = ()
    frontend_label: bool = False

    def instantiate(self, context: ItemContext, item_title: str) -> SubTask:
        """Create a concrete subtask for an item."""
        labels = list(self.labels)
        if self.frontend_label:
            labels.append("frontend" if context.is_frontend else "backend")
        return SubTask(
            title=self.title,
            description=self.description.format(title=item_title),
            complexity=self.complexity,
            priority=self.priority,
            category=self.category,
            estimated_hours=self.estimated_hours,
            dependencies=list(self.dependencies),
            labels=labels,
            acceptance_criteria=list(self.acceptance_criteria),
        )


@dataclass(frozen=True)
class DecompositionTemplate:
    """Named decomposition strategy."""

    kind: TemplateKind
    description: str
    approach: str
    blueprints: tuple[SubtaskBlueprint, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        """Display name of the template."""
        return self.kind.value

    def instantiate(self, context: ItemContext, item_title: str) -> list[SubTask]:
        """Create concrete subtasks for an item, in blueprint order."""
        return [bp.instantiate(context, item_title) for bp in self.blueprints]


FEATURE_TEMPLATE = DecompositionTemplate(
    kind=TemplateKind.FEATURE,
    description="Standard feature development workflow",
    approach="Incremental development with continuous testing and validation",
    blueprints=(
        SubtaskBlueprint(
            title="Research and Requirements Analysis",
            description="Research existing solutions and define detailed requirements for {title}",
            complexity=2,
            priority=SubtaskPriority.HIGH,
            category=SubtaskCategory.PLANNING,
            estimated_hours=8,
            labels=("research", "requirements"),
            acceptance_criteria=(
                "Requirements documented and reviewed",
                "Technical approach decided",
                "Dependencies identified",
            ),
        ),
        SubtaskBlueprint(
            title="Design and Architecture",
            description="Design the architecture and user interface for {title}",
            complexity=3,
            priority=SubtaskPriority.HIGH,
            category=SubtaskCategory.DESIGN,
            estimated_hours=12,
            labels=("design", "architecture"),
            acceptance_criteria=(
                "Architecture diagram created",
                "API endpoints defined",
                "UI/UX mockups ready",
            ),
            dependencies=("Research and Requirements Analysis",),
        ),
        SubtaskBlueprint(
            title="Core Implementation",
            description="Implement the main functionality for {title}",
            complexity=5,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.DEVELOPMENT,
            estimated_hours=20,
            labels=("implementation",),
            acceptance_criteria=(
                "Core functionality implemented",
                "Basic error handling added",
                "Code follows standards",
            ),
            dependencies=("Design and Architecture",),
            frontend_label=True,
        ),
        SubtaskBlueprint(
            title="Testing and Validation",
            description="Create comprehensive tests for {title}",
            complexity=3,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.QA,
            estimated_hours=12,
            labels=("testing", "qa"),
            acceptance_criteria=(
                "Unit tests written and passing",
                "Integration tests added",
                "Edge cases covered",
            ),
            dependencies=("Core Implementation",),
        ),
        SubtaskBlueprint(
            title="Documentation and Polish",
            description="Document {title} and add final polish",
            complexity=2,
            priority=SubtaskPriority.LOW,
            category=SubtaskCategory.DOCUMENTATION,
            estimated_hours=6,
            labels=("documentation", "polish"),
            acceptance_criteria=(
                "User documentation written",
                "Code comments added",
                "README updated",
            ),
            dependencies=("Testing and Validation",),
        ),
    ),
)

BUG_FIX_TEMPLATE = DecompositionTemplate(
    kind=TemplateKind.BUG_FIX,
    description="Systematic bug investigation and resolution",
    approach="Systematic investigation followed by careful implementation and thorough testing",
    blueprints=(
        SubtaskBlueprint(
            title="Bug Investigation and Reproduction",
            description="Investigate and consistently reproduce the bug described in {title}",
            complexity=2,
            priority=SubtaskPriority.HIGH,
            category=SubtaskCategory.ANALYSIS,
            estimated_hours=6,
            labels=("investigation", "bug"),
            acceptance_criteria=(
                "Bug consistently reproduced",
                "Steps to reproduce documented",
                "Impact assessment completed",
            ),
        ),
        SubtaskBlueprint(
            title="Root Cause Analysis",
            description="Identify the root cause of the bug and plan the fix",
            complexity=3,
            priority=SubtaskPriority.HIGH,
            # Debugging work; only reproduction belongs to the analysis phase
            category=SubtaskCategory.DEVELOPMENT,
            estimated_hours=8,
            labels=("analysis", "debugging"),
            acceptance_criteria=(
                "Root cause identified",
                "Fix strategy planned",
                "Potential side effects assessed",
            ),
            dependencies=("Bug Investigation and Reproduction",),
        ),
        SubtaskBlueprint(
            title="Implement Fix",
            description="Implement the fix for {title}",
            complexity=3,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.DEVELOPMENT,
            estimated_hours=10,
            labels=("fix", "implementation"),
            acceptance_criteria=(
                "Fix implemented and tested",
                "No new bugs introduced",
                "Code reviewed",
            ),
            dependencies=("Root Cause Analysis",),
        ),
        SubtaskBlueprint(
            title="Regression Testing",
            description="Perform thorough regression testing to ensure the fix works correctly",
            complexity=2,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.QA,
            estimated_hours=6,
            labels=("testing", "regression"),
            acceptance_criteria=(
                "Original bug resolved",
                "No regression detected",
                "Test cases added for prevention",
            ),
            dependencies=("Implement Fix",),
        ),
    ),
)

REFACTORING_TEMPLATE = DecompositionTemplate(
    kind=TemplateKind.REFACTORING,
    description="Systematic code improvement and optimization",
    approach="Test-driven refactoring with comprehensive safety checks",
    blueprints=(
        SubtaskBlueprint(
            title="Code Analysis and Planning",
            description="Analyze current code and plan refactoring approach for {title}",
            complexity=2,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.PLANNING,
            estimated_hours=8,
            labels=("analysis", "planning"),
            acceptance_criteria=(
                "Current code analyzed",
                "Refactoring plan documented",
                "Risks identified",
            ),
        ),
        SubtaskBlueprint(
            title="Create Comprehensive Tests",
            description="Create tests to ensure refactoring doesn't break functionality",
            complexity=3,
            priority=SubtaskPriority.HIGH,
            category=SubtaskCategory.QA,
            estimated_hours=12,
            labels=("testing", "safety"),
            acceptance_criteria=(
                "Comprehensive test coverage",
                "All tests passing",
                "Edge cases covered",
            ),
            dependencies=("Code Analysis and Planning",),
        ),
        SubtaskBlueprint(
            title="Implement Refactoring",
            description="Perform the actual refactoring of {title}",
            complexity=4,
            priority=SubtaskPriority.MEDIUM,
            category=SubtaskCategory.DEVELOPMENT,
            estimated_hours=16,
            labels=("refactor", "implementation"),
            acceptance_criteria=(
                "Code refactored as planned",
                "All tests still passing",
                "Performance maintained or improved",
            ),
            dependencies=("Create Comprehensive Tests",),
        ),
        SubtaskBlueprint(
            title="Documentation Update",
            description="Update documentation to reflect refactored code",
            complexity=1,
            priority=SubtaskPriority.LOW,
            category=SubtaskCategory.DOCUMENTATION,
            estimated_hours=4,
            labels=("documentation",),
            acceptance_criteria=(
                "Code comments updated",
                "Architecture docs updated",
                "API docs reflect changes",
            ),
            dependencies=("Implement Refactoring",),
        ),
    ),
)

TEMPLATES: dict[TemplateKind, DecompositionTemplate] = {
    TemplateKind.FEATURE: FEATURE_TEMPLATE,
    TemplateKind.BUG_FIX: BUG_FIX_TEMPLATE,
    TemplateKind.REFACTORING: REFACTORING_TEMPLATE,
}


def classify(context: ItemContext) -> TemplateKind:
    """Pick a template kind: bug, then refactor, then feature."""
    if context.is_bug:
        return TemplateKind.BUG_FIX
    if context.is_refactor:
        return TemplateKind.REFACTORING
    return TemplateKind.FEATURE


def select_template(
    item: WorkItem,
    template_type: str = "auto",
    context: ItemContext | None = None,
) -> DecompositionTemplate:
    """
    Select the decomposition template for a work item.

    Args:
        item: Work item to decompose
        template_type: ``"auto"`` to classify the item, otherwise a
            (partial, case-insensitive) template name such as ``"bug"``
        context: Precomputed item context (computed when omitted)

    Returns:
        The selected template; unknown names fall back to Feature Implementation
    """
    if not template_type or template_type.lower() == "auto":
        return TEMPLATES[classify(context or analyze_item_context(item))]

    wanted = template_type.lower()
    for kind, template in TEMPLATES.items():
        if wanted in kind.value.lower():
            return template

    return FEATURE_TEMPLATE
