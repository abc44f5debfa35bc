"""Per-container storage of registered nodes.

A container's graph maps each registered name to a :class:`Node`. A node
either holds a value known at registration time, or a provider together with
the dependencies it declares. A provider node is resolved at most once; it
keeps its provider and dependencies afterwards so that it can still be
inspected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from lazywire.domain import DependencyRef, ProviderKind

__all__ = ["Node", "DependencyGraph"]

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A registered name's entry in the dependency graph.

    Attributes:
        provider: The factory or class producing the value; None for value nodes.
        dependencies: The provider's declared dependencies, in order.
        kind: How the provider is invoked; None for value nodes.
        value: The node's value, once known.
        resolved: Whether ``value`` holds the node's value.
        resolving_chain: While the provider is being invoked, the chain of names
            that led to it. None otherwise.
    """

    provider: Optional[Callable] = None
    dependencies: list[DependencyRef] = field(default_factory=list)
    kind: Optional[ProviderKind] = None
    value: Any = None
    resolved: bool = False
    resolving_chain: Optional[list[str]] = None

    @staticmethod
    def for_value(value: Any) -> "Node":
        return Node(value=value, resolved=True)

    @staticmethod
    def for_provider(provider: Callable, dependencies: list[DependencyRef]) -> "Node":
        return Node(provider, list(dependencies), ProviderKind.of(provider))

    @property
    def in_progress(self) -> bool:
        return self.resolving_chain is not None

    def settle(self, value: Any) -> None:
        """Record the provider's result. Later resolutions return it unchanged."""
        self.value = value
        self.resolved = True


class DependencyGraph:
    """Mapping from names to nodes, in registration order.

    Replacing a node keeps the name's original position.
    """

    def __init__(self):
        self._nodes: dict[str, Node] = {}

    def __setitem__(self, name: str, node: Node):
        if name in self._nodes:
            logger.debug("Replacing node %r", name)
        self._nodes[name] = node

    def __getitem__(self, name: str) -> Node:
        return self._nodes[name]

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def get(self, name: str) -> Optional[Node]:
        return self._nodes.get(name)

    def names(self) -> list[str]:
        return list(self._nodes)
