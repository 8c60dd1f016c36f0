"""Configuration models for memolens."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from memolens.errors import MalformedConfigurationError

CONFIG_FILENAME = ".memolensrc.toml"

DEFAULT_IGNORE_PATTERNS = [
    r"(^|/)__tests__/",
    r"(^|/)tests?/",
    r"\.(test|spec)\.[jt]sx?$",
    r"(^|/)stories/",
    r"\.stories\.[jt]sx?$",
]


class MemoThreshold(BaseModel):
    """Thresholds that drive component-level memoization advice."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    props_count: int = Field(description="Prop count above which a component is prop-heavy")
    render_count: int = Field(description="Estimated render count considered frequent")


class PerformanceThreshold(BaseModel):
    """Thresholds that drive expensive-work detection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    complexity: int = Field(description="Loop complexity (2^depth) above which a loop is expensive")
    array_size: int = Field(description="Literal array size above which array work is expensive")
    computation_weight: float = Field(
        description="Reserved weight for impact estimation, must lie in [0, 1]",
    )


class AnalyzerConfig(BaseSettings):
    """Main memolens configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEMOLENS_",
        env_nested_delimiter="__",
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    memo_threshold: MemoThreshold = Field(
        default_factory=lambda: MemoThreshold(props_count=3, render_count=5),
        validation_alias=AliasChoices("memo_threshold", "memoThreshold"),
    )
    performance_threshold: PerformanceThreshold = Field(
        default_factory=lambda: PerformanceThreshold(
            complexity=10, array_size=100, computation_weight=0.7
        ),
        validation_alias=AliasChoices("performance_threshold", "performanceThreshold"),
    )
    ignore_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        validation_alias=AliasChoices("ignore_patterns", "ignorePatterns"),
        description="Regular expressions; matching file paths get no suggestions",
    )
    custom_rules: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("custom_rules", "customRules"),
        description="Extra OptimizationRule records appended after the built-ins",
    )

    def validate_thresholds(self) -> None:
        """Raise MalformedConfigurationError if any value is unusable."""
        positive = {
            "memo_threshold.props_count": self.memo_threshold.props_count,
            "memo_threshold.render_count": self.memo_threshold.render_count,
            "performance_threshold.complexity": self.performance_threshold.complexity,
            "performance_threshold.array_size": self.performance_threshold.array_size,
        }
        for name, value in positive.items():
            if value is None:
                raise MalformedConfigurationError(f"Missing threshold: {name}", field=name)
            if value <= 0:
                raise MalformedConfigurationError(
                    f"Threshold {name} must be positive, got {value}", field=name
                )

        weight = self.performance_threshold.computation_weight
        if weight is None or not 0.0 <= weight <= 1.0:
            raise MalformedConfigurationError(
                f"computation_weight must lie in [0, 1], got {weight}",
                field="performance_threshold.computation_weight",
            )

        for pattern in self.ignore_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise MalformedConfigurationError(
                    f"Invalid ignore pattern {pattern!r}: {e}", field="ignore_patterns"
                ) from e

        for rule in self.custom_rules:
            name = getattr(rule, "name", None)
            if not isinstance(name, str) or not name:
                raise MalformedConfigurationError("Custom rule without a name", field="custom_rules")
            if not isinstance(getattr(rule, "priority", None), int):
                raise MalformedConfigurationError(
                    f"Custom rule {name!r} needs an integer priority", field="custom_rules"
                )
            for attr in ("test", "suggestion"):
                if not callable(getattr(rule, attr, None)):
                    raise MalformedConfigurationError(
                        f"Custom rule {name!r} needs a callable {attr}", field="custom_rules"
                    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalyzerConfig:
        """Build and validate a config from a plain mapping."""
        try:
            config = cls(**data)
        except ValidationError as e:
            raise MalformedConfigurationError(f"Invalid configuration: {e}") from e
        config.validate_thresholds()
        return config

    @classmethod
    def load(cls, config_path: Path | None = None) -> AnalyzerConfig:
        """Load configuration from file and environment.

        Resolution order (highest to lowest priority):
        1. Environment variables
        2. Provided config file path
        3. .memolensrc.toml in current directory
        4. .memolensrc.toml in home directory
        5. Built-in defaults
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend(
            [
                Path.cwd() / CONFIG_FILENAME,
                Path.home() / CONFIG_FILENAME,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise MalformedConfigurationError(f"Cannot parse {loc}: {e}") from e
                break

        return cls.from_dict(config_data)


def get_default_config_toml() -> str:
    """Generate default .memolensrc.toml content."""
    patterns = ",\n".join(f"    '{p}'" for p in DEFAULT_IGNORE_PATTERNS)
    return f"""# memolens configuration

# Regular expressions matched against file paths; matches get no suggestions
ignore_patterns = [
{patterns},
]

[memo_threshold]
props_count = 3
render_count = 5

[performance_threshold]
complexity = 10  # Loop cost 2^depth must exceed this
array_size = 100  # Literal array sizes above this are expensive
computation_weight = 0.7  # Reserved, must lie in [0, 1]
"""
