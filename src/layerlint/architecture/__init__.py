"""Architecture domain: components, rule builder, rule engine, YAML loader."""

from layerlint.architecture.builder import Architecture
from layerlint.architecture.component import (
    ArchitectureError,
    Component,
    ComponentModel,
    ComponentNotDefinedError,
    NamespaceConflictError,
    Resolution,
    namespace_matches,
    resolve_component,
)
from layerlint.architecture.config import ArchitectureConfig, load_architecture
from layerlint.architecture.rule_engine import (
    EvaluationResult,
    ForbidRule,
    OnlyAllowRule,
    Rule,
    Violation,
    evaluate,
)

__all__ = [
    "Architecture",
    "ArchitectureConfig",
    "ArchitectureError",
    "Component",
    "ComponentModel",
    "ComponentNotDefinedError",
    "EvaluationResult",
    "ForbidRule",
    "NamespaceConflictError",
    "OnlyAllowRule",
    "Resolution",
    "Rule",
    "Violation",
    "evaluate",
    "load_architecture",
    "namespace_matches",
    "resolve_component",
]
