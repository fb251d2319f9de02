"""Component model: named components, namespace prefixes, and name resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

NAMESPACE_SEPARATOR = "\\"

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ArchitectureError(Exception):
    """Base class for configuration errors detected at declaration time."""


class ComponentNotDefinedError(ArchitectureError):
    """Raised when a chained call needs a current component but none is selected."""


class NamespaceConflictError(ArchitectureError):
    """Raised when one namespace prefix is claimed by two different components."""


# ---------------------------------------------------------------------------
# Namespace helpers
# ---------------------------------------------------------------------------


def normalize_namespace(name: str) -> str:
    """Strip surrounding whitespace and leading/trailing separators.

    ``\\App\\Logic\\`` and ``App\\Logic`` denote the same namespace.
    """
    return name.strip().strip(NAMESPACE_SEPARATOR)


def namespace_matches(prefix: str, name: str) -> bool:
    """Return True if *prefix* covers *name* on a segment boundary.

    ``App\\Foo`` matches ``App\\Foo`` and ``App\\Foo\\Bar`` but never
    ``App\\Foobar\\Baz``.  An empty prefix matches nothing.
    """
    prefix = normalize_namespace(prefix)
    name = normalize_namespace(name)
    if not prefix:
        return False
    if name == prefix:
        return True
    return name.startswith(prefix + NAMESPACE_SEPARATOR)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class Component:
    """A named logical module identified by one or more namespace prefixes.

    Identity is the name: two components with the same name compare equal.
    Within one :class:`ComponentModel` a name always maps to the same
    instance.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._namespaces: list[str] = []

    @property
    def namespaces(self) -> tuple[str, ...]:
        """Namespace prefixes in insertion order."""
        return tuple(self._namespaces)

    def add_namespace(self, namespace: str) -> bool:
        """Append *namespace*; return False when it was already present."""
        namespace = normalize_namespace(namespace)
        if namespace in self._namespaces:
            return False
        self._namespaces.append(namespace)
        return True

    def longest_match(self, name: str) -> int:
        """Length of the longest prefix of this component covering *name*, or -1."""
        best = -1
        for namespace in self._namespaces:
            if namespace_matches(namespace, name) and len(namespace) > best:
                best = len(namespace)
        return best

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Component):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Component({self.name!r}, namespaces={list(self._namespaces)!r})"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a fully-qualified name to a component.

    *ambiguous* lists the names of components tied at the longest matching
    prefix; when it is non-empty *component* is ``None``.
    """

    component: Component | None
    ambiguous: tuple[str, ...] = ()


def resolve_component(name: str, components: Iterable[Component]) -> Resolution:
    """Return the component whose longest matching prefix is the most specific.

    Ties at the same longest length are reported through
    :attr:`Resolution.ambiguous` and resolve to no component.
    """
    best_length = -1
    best: list[Component] = []
    for component in components:
        length = component.longest_match(name)
        if length < 0:
            continue
        if length > best_length:
            best_length = length
            best = [component]
        elif length == best_length:
            best.append(component)

    if not best:
        return Resolution(component=None)
    if len(best) > 1:
        return Resolution(component=None, ambiguous=tuple(sorted(c.name for c in best)))
    return Resolution(component=best[0])


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class ComponentModel:
    """Registry of components and the namespace prefixes they own."""

    def __init__(self) -> None:
        self._components: dict[str, Component] = {}
        self._owners: dict[str, Component] = {}

    def declare(self, name: str) -> Component:
        """Get or create the component called *name*."""
        component = self._components.get(name)
        if component is None:
            component = Component(name)
            self._components[name] = component
        return component

    def add_namespace(self, component: Component | str, namespace: str) -> Component:
        """Add *namespace* to *component*.

        *component* is a name or a component declared by this model; any other
        instance raises :class:`ArchitectureError`.  Raises
        :class:`NamespaceConflictError` when a different component already owns
        the same prefix.
        """
        if isinstance(component, str):
            component = self.declare(component)
        elif self._components.get(component.name) is not component:
            msg = f"Component '{component.name}' does not belong to this model"
            raise ArchitectureError(msg)
        normalized = normalize_namespace(namespace)
        if not normalized:
            msg = f"Component '{component.name}': namespace prefix must not be empty"
            raise ValueError(msg)

        owner = self._owners.get(normalized)
        if owner is not None and owner is not component:
            msg = (
                f"Namespace '{normalized}' is already claimed by component "
                f"'{owner.name}', cannot add it to '{component.name}'"
            )
            raise NamespaceConflictError(msg)

        component.add_namespace(normalized)
        self._owners[normalized] = component
        return component

    def get(self, name: str) -> Component | None:
        return self._components.get(name)

    def resolve(self, name: str) -> Resolution:
        """Resolve a fully-qualified name to its most specific component."""
        return resolve_component(name, self._components.values())

    @property
    def components(self) -> tuple[Component, ...]:
        return tuple(self._components.values())

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __len__(self) -> int:
        return len(self._components)
