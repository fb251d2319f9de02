"""Architecture rule engine: rule types, violations, and evaluation against references."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from layerlint.architecture.component import namespace_matches
from layerlint.source.symbol_index import SymbolKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from layerlint.architecture.component import Component, ComponentModel
    from layerlint.source.extractor import SymbolReference
    from layerlint.source.symbol_index import SymbolIndex

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ForbidRule:
    """*source* must not reference *target* (optionally ignoring interfaces)."""

    source: Component
    target: Component
    ignore_interfaces: bool = False

    @property
    def rule_type(self) -> str:
        return "forbid_direct" if self.ignore_interfaces else "forbid"

    @property
    def description(self) -> str:
        if self.ignore_interfaces:
            return f"{self.source.name} must not directly depend on {self.target.name}"
        return f"{self.source.name} must not depend on {self.target.name}"


@dataclass(frozen=True)
class OnlyAllowRule:
    """*source* may only reference itself and the components in *allowed*."""

    source: Component
    allowed: frozenset[Component]

    @property
    def rule_type(self) -> str:
        return "only_allow"

    @property
    def description(self) -> str:
        names = ", ".join(sorted(c.name for c in self.allowed))
        return f"{self.source.name} must only depend on [{names}]"


Rule = ForbidRule | OnlyAllowRule


@dataclass(frozen=True)
class Violation:
    """A reference that breaks a declared rule."""

    rule: Rule
    source: Component
    target: Component
    reference: SymbolReference

    @property
    def rule_type(self) -> str:
        return self.rule.rule_type

    @property
    def source_name(self) -> str:
        return self.source.name

    @property
    def target_name(self) -> str:
        return self.target.name

    @property
    def message(self) -> str:
        return (
            f"'{self.reference.namespace or '<global>'}' ({self.source.name}) references "
            f"{self.reference.kind.value} '{self.reference.name}' ({self.target.name}), "
            f"violating: {self.rule.description}"
        )


@dataclass
class EvaluationResult:
    """Violations plus non-fatal ambiguity diagnostics."""

    violations: list[Violation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _sort_key(v: Violation) -> tuple[str, str, str, str, str, str, int]:
    ref = v.reference
    return (
        v.source.name,
        v.target.name,
        v.rule_type,
        ref.name,
        ref.namespace,
        ref.file_path or "",
        ref.line_number or 0,
    )


def evaluate(
    model: ComponentModel,
    rules: Iterable[Rule],
    references: Iterable[SymbolReference],
    *,
    index: SymbolIndex | None = None,
) -> EvaluationResult:
    """Check every rule against every resolved reference.

    Self-references and references that resolve to no component are skipped.
    Forbid and only-allow rules are evaluated independently, so one reference
    may violate both.  The result is sorted and does not depend on the order
    of *references*.  When *index* is given, its duplicate-declaration
    conflicts are included in the warnings.
    """
    forbid_rules: dict[tuple[Component, Component], list[ForbidRule]] = {}
    only_allow_rules: dict[Component, list[OnlyAllowRule]] = {}
    for rule in rules:
        if isinstance(rule, ForbidRule):
            forbid_rules.setdefault((rule.source, rule.target), []).append(rule)
        else:
            only_allow_rules.setdefault(rule.source, []).append(rule)

    warnings: set[str] = set()
    if index is not None:
        warnings.update(conflict.message for conflict in index.conflicts)

    case_noted: set[str] = set()

    def _note_case_mismatch(name: str) -> None:
        folded = name.lower()
        if folded in case_noted:
            return
        for component in model.components:
            for namespace in component.namespaces:
                if namespace_matches(namespace.lower(), folded):
                    case_noted.add(folded)
                    logger.debug(
                        "Name '%s' matches prefix '%s' of component '%s' only when "
                        "case is ignored; namespace prefixes are case-sensitive",
                        name,
                        namespace,
                        component.name,
                    )
                    return

    def _resolve(name: str) -> Component | None:
        resolution = model.resolve(name)
        if resolution.component is None and not resolution.ambiguous:
            _note_case_mismatch(name)
        if resolution.ambiguous:
            warning = (
                f"Name '{name}' matches components {list(resolution.ambiguous)} "
                f"at the same specificity; references through it are ignored"
            )
            if warning not in warnings:
                logger.warning(warning)
                warnings.add(warning)
        return resolution.component

    violations: list[Violation] = []

    # Identical references collapse so each (rule, reference) pair fires once.
    for ref in dict.fromkeys(references):
        source = _resolve(ref.namespace)
        target = _resolve(ref.name)
        if source is None or target is None or source == target:
            continue

        for forbid in forbid_rules.get((source, target), ()):
            if forbid.ignore_interfaces and ref.kind is SymbolKind.INTERFACE:
                continue
            violations.append(Violation(rule=forbid, source=source, target=target, reference=ref))

        for only_allow in only_allow_rules.get(source, ()):
            if target in only_allow.allowed:
                continue
            violations.append(
                Violation(rule=only_allow, source=source, target=target, reference=ref)
            )

    violations.sort(key=_sort_key)
    return EvaluationResult(violations=violations, warnings=sorted(warnings))
