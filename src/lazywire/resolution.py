"""Recursive, memoizing resolution of names against a dependency graph.

Each top-level request walks the graph depth-first. The chain of names being
resolved is passed explicitly down every recursive call, so that:

    - a name that reappears in its own chain is reported as a cycle;
    - a missing dependency is reported with the full path that led to it.

A provider node records the chain that reached it while its provider runs.
A provider that asks its own container for a name still in progress (a
re-entrant cycle) is therefore detected even though that request starts a
chain of its own.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from lazywire.domain import DependencyRef
from lazywire.errors import CircularDependencyError, DependencyNotFoundError
from lazywire.graph import DependencyGraph, Node
from lazywire.invocation import invoke

__all__ = ["Resolver", "normalise", "unshadow"]

logger = logging.getLogger(__name__)


def unshadow(name: str) -> str:
    """Strip one leading and one trailing underscore, if both are present.

    Example:
        >>> unshadow("_db_")
        'db'
        >>> unshadow("_db")
        '_db'
    """
    if len(name) > 2 and name.startswith("_") and name.endswith("_"):
        return name[1:-1]
    return name


def normalise(declared: str, optional: bool = False) -> DependencyRef:
    """Build the reference a declared name is looked up by.

    Shadowing underscores are stripped first, then a trailing ``?`` marks the
    lookup optional.
    """
    ref = DependencyRef.parse(unshadow(declared))
    return DependencyRef(ref.name, ref.optional or optional)


class Resolver:
    """Resolve names and dependency references against a graph."""

    def __init__(self, graph: DependencyGraph):
        self._graph = graph

    def resolve_requests(
        self,
        requests: Sequence[Any],
        locals: Optional[Mapping[str, Any]] = None,
        context: Optional[str] = None,
    ) -> list[Any]:
        """Resolve top-level requests independently, in request order.

        Args:
            requests: Names (optionally shadowed with underscores or suffixed
                with ``?``) or DependencyRef instances.
            locals: Values that take precedence over the graph for the requested
                names. Falsy values are ignored.
            context: A label seeding each request's chain, for diagnostics.

        Returns:
            The resolved values, one per request.
        """
        return [self.resolve_request(request, locals, context) for request in requests]

    def resolve_request(
        self,
        request: Any,
        locals: Optional[Mapping[str, Any]] = None,
        context: Optional[str] = None,
    ) -> Any:
        ref = _as_ref(request)
        if locals:
            local = locals.get(ref.name)
            if local:
                return local
        chain = [context] if context else []
        return self._lookup(ref, chain)

    def resolve(self, ref: DependencyRef, chain: list[str]) -> Any:
        """Resolve one dependency reference.

        Args:
            ref: The dependency to resolve.
            chain: The names being resolved above this one, outermost first.

        Returns:
            The node's value, or None if the dependency is optional and missing.

        Raises:
            DependencyNotFoundError: If a required dependency has no node.
            CircularDependencyError: If the name is already being resolved.
        """
        return self._lookup(normalise(ref.name, ref.optional), chain)

    def _lookup(self, ref: DependencyRef, chain: list[str]) -> Any:
        name = ref.name
        node = self._graph.get(name)
        if node is None:
            if ref.optional:
                logger.debug("Optional dependency %r is not registered", name)
                return None
            raise DependencyNotFoundError(chain + [name])

        if node.resolved:
            logger.debug("Using memoized value of %r", name)
            return node.value

        if name in chain:
            raise CircularDependencyError(chain + [name])
        if node.in_progress:
            raise CircularDependencyError(node.resolving_chain + chain + [name])

        return self._materialise(name, node, chain + [name])

    def _materialise(self, name: str, node: Node, chain: list[str]) -> Any:
        node.resolving_chain = chain
        try:
            arguments = [self.resolve(dependency, chain) for dependency in node.dependencies]
            value = invoke(node.provider, arguments, node.kind)
        finally:
            node.resolving_chain = None

        node.settle(value)
        logger.debug("Resolved %r", name)
        return value


def _as_ref(request: Any) -> DependencyRef:
    if isinstance(request, DependencyRef):
        return normalise(request.name, request.optional)
    return normalise(request)
