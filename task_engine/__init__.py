"""
Task Engine

Ranks outstanding work items by a weighted multi-factor score and breaks
large items into dependency-ordered subtasks with a phased execution plan.
"""

from .models import (
    Milestone,
    WorkItem,
    TeamMemberWorkload,
    ReadinessResult,
    TaskScore,
    RecommendationResult,
    SubtaskPriority,
    SubtaskCategory,
    SubTask,
    ImplementationPhases,
    TaskBreakdown,
    DecompositionResult,
)

from .complexity import analyze_complexity

from .context import ItemContext, analyze_item_context

from .workload import analyze_team_workload

from .recommender import RecommendationEngine, recommend_tasks, find_item

from .templates import TemplateKind, DecompositionTemplate, select_template

from .decomposer import TaskDecomposer, generate_subtasks

from .dependency_graph import (
    build_dependency_graph,
    validate_dependency_graph,
    critical_path_depth,
    estimate_timeline,
    schedule_phases,
)

from .publisher import IssueTracker, ItemRef, SubtaskPublisher

from .snapshot import Snapshot, load_snapshot

from .exceptions import (
    TaskEngineError,
    InvalidArgumentError,
    ItemNotFoundError,
    SnapshotError,
    ConfigurationError,
    DecompositionError,
    DependencyError,
    DependencyCycleError,
    PublishError,
)

from .config_loader import (
    ConfigLoader,
    EngineConfig,
    PriorityFilter,
    load_config,
    create_default_config,
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Models
    "Milestone",
    "WorkItem",
    "TeamMemberWorkload",
    "ReadinessResult",
    "TaskScore",
    "RecommendationResult",
    "SubtaskPriority",
    "SubtaskCategory",
    "SubTask",
    "ImplementationPhases",
    "TaskBreakdown",
    "DecompositionResult",
    # Analysis
    "analyze_complexity",
    "ItemContext",
    "analyze_item_context",
    "analyze_team_workload",
    # Recommendation
    "RecommendationEngine",
    "recommend_tasks",
    "find_item",
    # Decomposition
    "TemplateKind",
    "DecompositionTemplate",
    "select_template",
    "TaskDecomposer",
    "generate_subtasks",
    "build_dependency_graph",
    "validate_dependency_graph",
    "critical_path_depth",
    "estimate_timeline",
    "schedule_phases",
    # Publishing
    "IssueTracker",
    "ItemRef",
    "SubtaskPublisher",
    # Snapshot
    "Snapshot",
    "load_snapshot",
    # Exceptions
    "TaskEngineError",
    "InvalidArgumentError",
    "ItemNotFoundError",
    "SnapshotError",
    "ConfigurationError",
    "DecompositionError",
    "DependencyError",
    "DependencyCycleError",
    "PublishError",
    # Config
    "ConfigLoader",
    "EngineConfig",
    "PriorityFilter",
    "load_config",
    "create_default_config",
]
