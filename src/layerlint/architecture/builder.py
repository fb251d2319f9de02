"""Fluent declaration surface for components and dependency rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from layerlint.architecture.component import (
    Component,
    ComponentModel,
    ComponentNotDefinedError,
)
from layerlint.architecture.rule_engine import (
    EvaluationResult,
    ForbidRule,
    OnlyAllowRule,
    Rule,
    Violation,
    evaluate,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from layerlint.source.extractor import SymbolReference
    from layerlint.source.symbol_index import SymbolIndex


class Architecture:
    """Components, their namespaces, and the rules between them.

    Rules are explicit statements appended to :attr:`rules` as soon as they
    are declared.  The fluent methods (``component``, ``must_not_depend_on``,
    ...) additionally move a *current component* cursor so declarations read
    as sentences::

        (
            Architecture()
            .component("Logic").identified_by_namespace("App\\\\Logic")
            .must_not_depend_on("IO").identified_by_namespace("App\\\\IO")
        )

    The cursor is builder state only; evaluation never looks at it.
    """

    def __init__(self) -> None:
        self.model = ComponentModel()
        self._rules: list[Rule] = []
        self._current: Component | None = None
        self._last: Component | None = None

    # -- explicit statements ------------------------------------------------

    def declare(self, name: str) -> Component:
        """Get or create the component called *name*."""
        return self.model.declare(name)

    def add_namespace(self, name: str, namespace: str) -> Component:
        return self.model.add_namespace(self.declare(name), namespace)

    def forbid(self, source: str, target: str, *, ignore_interfaces: bool = False) -> ForbidRule:
        """Declare that *source* must not depend on *target*."""
        rule = ForbidRule(
            source=self.declare(source),
            target=self.declare(target),
            ignore_interfaces=ignore_interfaces,
        )
        if rule not in self._rules:
            self._rules.append(rule)
        return rule

    def forbid_reverse(self, source: str, target: str) -> ForbidRule:
        """Declare that *target* must not depend on *source*."""
        return self.forbid(target, source)

    def only_allow(self, source: str, target: str) -> OnlyAllowRule:
        """Add *target* to the whitelist of *source*.

        Repeated calls for the same source extend one whitelist.
        """
        component = self.declare(source)
        allowed = self.declare(target)
        for idx, rule in enumerate(self._rules):
            if isinstance(rule, OnlyAllowRule) and rule.source == component:
                extended = OnlyAllowRule(source=component, allowed=rule.allowed | {allowed})
                self._rules[idx] = extended
                return extended
        created = OnlyAllowRule(source=component, allowed=frozenset({allowed}))
        self._rules.append(created)
        return created

    def components(self, definitions: Mapping[str, str | Sequence[str]]) -> Architecture:
        """Declare components from a ``name -> namespace(s)`` mapping.

        Equivalent to ``component(name).identified_by_namespace(ns)`` for each
        entry, except that the current component selection is left as it was.
        """
        current, last = self._current, self._last
        try:
            for name, identified_by in definitions.items():
                namespaces = [identified_by] if isinstance(identified_by, str) else identified_by
                component = self.declare(name)
                for namespace in namespaces:
                    self.model.add_namespace(component, namespace)
        finally:
            self._current, self._last = current, last
        return self

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    # -- fluent sugar ---------------------------------------------------------

    def component(self, name: str) -> Architecture:
        """Select (creating if needed) the component called *name*."""
        self._set_current(self.declare(name))
        return self

    def identified_by_namespace(self, namespace: str) -> Architecture:
        """Add *namespace* to the current component; may be called repeatedly."""
        self.model.add_namespace(self._get_current(), namespace)
        return self

    def must_not_depend_on(self, name: str) -> Architecture:
        """The current component must not depend on *name*, which becomes current."""
        source = self._get_current()
        self.forbid(source.name, name)
        self._set_current(self.declare(name))
        return self

    def must_not_directly_depend_on(self, name: str) -> Architecture:
        """Like :meth:`must_not_depend_on` but references to interfaces are allowed."""
        source = self._get_current()
        self.forbid(source.name, name, ignore_interfaces=True)
        self._set_current(self.declare(name))
        return self

    def and_must_not_depend_on(self, name: str) -> Architecture:
        """Same as :meth:`must_not_depend_on`, applied to the previous component."""
        self._restore_last()
        return self.must_not_depend_on(name)

    def must_not_be_depended_on_by(self, name: str) -> Architecture:
        """Component *name* must not depend on the current one, and becomes current."""
        target = self._get_current()
        self.forbid_reverse(target.name, name)
        self._set_current(self.declare(name))
        return self

    def and_must_not_be_depended_on_by(self, name: str) -> Architecture:
        self._restore_last()
        return self.must_not_be_depended_on_by(name)

    def must_only_depend_on(self, name: str) -> Architecture:
        """The current component may only depend on itself and *name*."""
        source = self._get_current()
        self.only_allow(source.name, name)
        self._set_current(self.declare(name))
        return self

    def and_must_only_depend_on(self, name: str) -> Architecture:
        self._restore_last()
        return self.must_only_depend_on(name)

    # -- evaluation -----------------------------------------------------------

    def evaluate(
        self, references: Iterable[SymbolReference], *, index: SymbolIndex | None = None
    ) -> EvaluationResult:
        return evaluate(self.model, self._rules, references, index=index)

    def validate(self, references: Iterable[SymbolReference]) -> list[Violation]:
        """Violations only, for batch validation runners."""
        return self.evaluate(references).violations

    # -- cursor ---------------------------------------------------------------

    def _get_current(self) -> Component:
        if self._current is None:
            msg = "No current component exists"
            raise ComponentNotDefinedError(msg)
        return self._current

    def _set_current(self, component: Component) -> None:
        self._last = self._current
        self._current = component

    def _restore_last(self) -> None:
        self._current = self._last
        self._last = None
