"""Architecture definition loader: parse layerlint.yml into an Architecture."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from layerlint.architecture.builder import Architecture

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
VALID_RULE_TYPES: frozenset[str] = frozenset({"forbid", "forbid_reverse", "only_allow"})

DEFAULT_CONFIG_NAME = "layerlint.yml"


@dataclass
class ArchitectureConfig:
    """A loaded architecture plus where to look for sources."""

    architecture: Architecture
    paths: list[Path] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _str_list(raw: object, context: str) -> list[str]:
    """Accept a string or a list of strings, returning a list."""
    if isinstance(raw, str):
        items = [raw]
    elif isinstance(raw, list):
        items = raw
    else:
        msg = f"{context} must be a string or a list of strings"
        raise ValueError(msg)

    result: list[str] = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            msg = f"{context} must contain only non-empty strings"
            raise ValueError(msg)
        result.append(item)
    return result


def _parse_components(architecture: Architecture, data: object) -> None:
    if not isinstance(data, dict):
        msg = "layerlint.yml: 'components' must be a mapping of name to namespace(s)"
        raise ValueError(msg)

    definitions: dict[str, list[str]] = {}
    for name, namespaces in data.items():
        definitions[str(name)] = _str_list(namespaces, f"Component '{name}'")
    architecture.components(definitions)


def _component_name(data: dict[str, object], key: str, context: str) -> str:
    value = data.get(key)
    if value is None or not isinstance(value, str) or not value.strip():
        msg = f"{context}: '{key}' must be a non-empty component name"
        raise ValueError(msg)
    return value


def _parse_rule(architecture: Architecture, idx: int, rule_data: object) -> None:
    """Parse one entry of the 'rules' list and declare it on *architecture*."""
    if not isinstance(rule_data, dict):
        msg = f"layerlint.yml: rule at index {idx} must be a mapping"
        raise ValueError(msg)

    present = [key for key in rule_data if key in VALID_RULE_TYPES]
    if len(present) != 1 or len(rule_data) != 1:
        msg = (
            f"layerlint.yml: rule at index {idx} must have exactly one of "
            f"{sorted(VALID_RULE_TYPES)}"
        )
        raise ValueError(msg)

    rule_type = present[0]
    context = f"Rule {idx} ({rule_type})"
    body = rule_data[rule_type]
    if not isinstance(body, dict):
        msg = f"{context}: body must be a mapping"
        raise ValueError(msg)

    source = _component_name(body, "from", context)

    if rule_type == "only_allow":
        for target in _str_list(body.get("to"), f"{context}: 'to'"):
            architecture.only_allow(source, target)
        return

    target = _component_name(body, "to", context)
    if rule_type == "forbid_reverse":
        architecture.forbid_reverse(source, target)
        return

    ignore_raw = body.get("ignore_interfaces", False)
    if not isinstance(ignore_raw, bool):
        msg = f"{context}: 'ignore_interfaces' must be true or false"
        raise ValueError(msg)
    architecture.forbid(source, target, ignore_interfaces=ignore_raw)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def load_architecture(config_path: Path) -> ArchitectureConfig:
    """Parse an architecture definition file.

    Raises ``ValueError`` on schema errors and
    :class:`~layerlint.architecture.component.ArchitectureError` when the
    declarations conflict (e.g. one namespace claimed by two components).
    Relative ``paths`` are resolved against the file's directory.
    """
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        msg = "layerlint.yml must be a YAML mapping"
        raise ValueError(msg)

    version = data.get("version")
    if version is None:
        msg = "layerlint.yml: missing required 'version' field"
        raise ValueError(msg)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"layerlint.yml: unsupported version {version}, expected one of {expected}"
        raise ValueError(msg)

    architecture = Architecture()
    _parse_components(architecture, data.get("components", {}))

    rules_data = data.get("rules", [])
    if not isinstance(rules_data, list):
        msg = "layerlint.yml: 'rules' must be a list"
        raise ValueError(msg)
    for idx, rule_data in enumerate(rules_data):
        _parse_rule(architecture, idx, rule_data)

    base_dir = config_path.parent
    paths = [base_dir / p for p in _str_list(data.get("paths", ["."]), "layerlint.yml: 'paths'")]
    exclude_raw = data.get("exclude", [])
    exclude = _str_list(exclude_raw, "layerlint.yml: 'exclude'") if exclude_raw else []

    return ArchitectureConfig(architecture=architecture, paths=paths, exclude=exclude)
