"""
Configuration Loader for the task engine

Provides YAML configuration parsing with Pydantic validation,
base-config merging, and environment variable substitution.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PriorityFilter(str, Enum):
    """Minimum priority class accepted by the ranker."""
    ALL = "all"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def threshold(self) -> float:
        """Minimum priority score for this class."""
        return {
            PriorityFilter.ALL: 0.0,
            PriorityFilter.LOW: 0.4,
            PriorityFilter.MEDIUM: 0.6,
            PriorityFilter.HIGH: 0.8,
            PriorityFilter.CRITICAL: 1.0,
        }[self]


class ScoringWeights(BaseModel):
    """Weights of the component scores in the total."""
    priority: float = Field(default=0.4, ge=0)
    urgency: float = Field(default=0.25, ge=0)
    availability: float = Field(default=0.2, ge=0)
    skill_match: float = Field(default=0.15, ge=0)
    readiness: float = Field(default=0.1, ge=0)


class RecommendationConfig(BaseModel):
    """Ranking defaults."""
    max_recommendations: int = Field(default=5, ge=1)
    include_blocked: bool = False
    context_switch_penalty: float = Field(default=0.0, ge=0, le=1.0)
    priority_filter: PriorityFilter = Field(default=PriorityFilter.ALL)


class TeamConfig(BaseModel):
    """Team roster and capacity."""
    members: List[str] = Field(default_factory=list)
    max_capacity: int = Field(default=15, ge=1)


class DecompositionConfig(BaseModel):
    """Subtask generation and scheduling constants."""
    max_subtasks: int = Field(default=8, ge=1)
    min_complexity: int = Field(default=1, ge=1, le=8)
    low_value_threshold: int = Field(default=3, ge=1, le=8)
    inflation_ceiling: float = Field(default=1.3, ge=1.0)
    rescale_target: float = Field(default=1.1, gt=0)
    productive_hours_per_day: float = Field(default=6.0, gt=0, le=24)
    min_parallel_efficiency: float = Field(default=0.6, gt=0, le=1.0)

    @model_validator(mode="after")
    def rescale_target_within_ceiling(self):
        """Ensure rescaling lands below the inflation ceiling."""
        if self.rescale_target > self.inflation_ceiling:
            raise ValueError("rescale_target must not exceed inflation_ceiling")
        return self


class PublishingConfig(BaseModel):
    """Sub-issue publishing behaviour."""
    include_checklist: bool = True
    max_attempts: int = Field(default=3, ge=1, le=10)
    initial_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=30.0, ge=0)

    @model_validator(mode="after")
    def max_delay_greater_than_initial(self):
        """Ensure max_delay is greater than initial_delay."""
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be greater than initial_delay")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO)
    format: str = Field(default="text", pattern="^(json|text)$")
    file: Optional[str] = None
    max_size_mb: int = Field(default=10, ge=1)
    backup_count: int = Field(default=5, ge=0)
    console: bool = True


class EngineConfig(BaseModel):
    """Top-level engine configuration."""
    model_config = {"extra": "forbid"}

    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    recommendation: RecommendationConfig = Field(default_factory=RecommendationConfig)
    team: TeamConfig = Field(default_factory=TeamConfig)
    decomposition: DecompositionConfig = Field(default_factory=DecompositionConfig)
    publishing: PublishingConfig = Field(default_factory=PublishingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigLoader:
    """
    Configuration loader for the task engine.

    Features:
    - YAML configuration parsing
    - Pydantic validation
    - Base config merging
    - Environment variable substitution

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load("task-engine.yaml")
        >>> config.recommendation.max_recommendations
        5
    """

    # Environment variable pattern: ${VAR_NAME} or ${VAR_NAME:-default}
    ENV_PATTERN = re.compile(r'\$\{([^}]+)\}')

    def __init__(self):
        """Initialize the config loader."""
        self._config: Optional[EngineConfig] = None
        self._loaded_files: Set[str] = set()

    def load(
        self,
        config_path: Union[str, Path],
        base_config: Optional[Union[str, Path, Dict[str, Any]]] = None,
        env_substitution: bool = True
    ) -> EngineConfig:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file
            base_config: Optional base config to merge with
            env_substitution: Enable environment variable substitution

        Returns:
            Validated EngineConfig

        Raises:
            ConfigurationError: If the file is missing or the config is invalid
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(
                f"Config file not found: {config_path}",
                error_code="CONFIG_NOT_FOUND"
            )

        merged_config: Dict[str, Any] = {}

        if base_config:
            if isinstance(base_config, (str, Path)):
                base_data = self._load_yaml_file(Path(base_config))
                merged_config = self._deep_merge(merged_config, base_data)
            elif isinstance(base_config, dict):
                merged_config = self._deep_merge(merged_config, base_config)

        config_data = self._load_yaml_file(config_path)
        merged_config = self._deep_merge(merged_config, config_data)

        self._loaded_files.add(str(config_path))

        if env_substitution:
            merged_config = self._substitute_env_vars(merged_config)

        self._config = self._validate(merged_config)
        return self._config

    def load_dict(self, data: Dict[str, Any], env_substitution: bool = True) -> EngineConfig:
        """
        Load configuration from an in-memory mapping.

        Args:
            data: Raw configuration data
            env_substitution: Enable environment variable substitution

        Returns:
            Validated EngineConfig
        """
        if env_substitution:
            data = self._substitute_env_vars(data)
        self._config = self._validate(data)
        return self._config

    def _validate(self, data: Dict[str, Any]) -> EngineConfig:
        """Validate raw data into an EngineConfig."""
        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                error_code="INVALID_CONFIG"
            ) from e

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load YAML file and return data."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Config file {path} is not valid YAML: {e}",
                error_code="INVALID_YAML"
            ) from e
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping",
                error_code="INVALID_CONFIG"
            )
        return data or {}

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _substitute_env_vars(self, data: Any) -> Any:
        """Substitute environment variables in data."""
        if isinstance(data, dict):
            return {k: self._substitute_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            return self._substitute_env_string(data)
        else:
            return data

    def _substitute_env_string(self, value: str) -> str:
        """Substitute environment variables in a string."""
        def replace_var(match):
            var_expr = match.group(1)

            # Default value syntax: VAR:-default
            if ':-' in var_expr:
                var_name, default = var_expr.split(':-', 1)
                return os.environ.get(var_name, default)

            # Required syntax: VAR:?error
            if ':?' in var_expr:
                var_name, error_msg = var_expr.split(':?', 1)
                if var_name not in os.environ:
                    raise ConfigurationError(
                        f"Required environment variable {var_name}: {error_msg}",
                        error_code="MISSING_ENV_VAR"
                    )
                return os.environ[var_name]

            return os.environ.get(var_expr, match.group(0))

        return self.ENV_PATTERN.sub(replace_var, value)

    def get_config(self) -> EngineConfig:
        """
        Get the loaded configuration.

        Returns:
            Loaded EngineConfig
        """
        if not self._config:
            raise RuntimeError("No configuration loaded")

        return self._config

    def get_loaded_files(self) -> Set[str]:
        """
        Get set of loaded configuration files.

        Returns:
            Set of file paths
        """
        return self._loaded_files.copy()

    def export_to_yaml(
        self,
        filepath: Union[str, Path],
        config: Optional[EngineConfig] = None
    ) -> Path:
        """
        Export configuration to YAML file.

        Args:
            filepath: Output file path
            config: Config to export (uses loaded config if None)

        Returns:
            Path to exported file
        """
        config = config or self._config

        if not config:
            raise RuntimeError("No configuration to export")

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        data = self._remove_none_values(config.model_dump(mode="json"))

        with open(filepath, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

        return filepath

    def _remove_none_values(self, data: Any) -> Any:
        """Remove None values from data structure."""
        if isinstance(data, dict):
            return {k: self._remove_none_values(v) for k, v in data.items() if v is not None}
        elif isinstance(data, list):
            return [self._remove_none_values(item) for item in data if item is not None]
        else:
            return data


def load_config(
    config_path: Union[str, Path],
    base_config: Optional[Union[str, Path]] = None
) -> EngineConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to config file
        base_config: Optional base config

    Returns:
        Loaded EngineConfig
    """
    loader = ConfigLoader()
    return loader.load(config_path, base_config)


def create_default_config() -> EngineConfig:
    """
    Create a default configuration.

    Returns:
        Default EngineConfig
    """
    return EngineConfig()
