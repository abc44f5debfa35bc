"""Exceptions raised while registering or resolving providers."""

from typing import Any, Sequence

__all__ = [
    "DependencyError",
    "ParseError",
    "DependencyNotFoundError",
    "CircularDependencyError",
    "LoaderError",
]


def format_chain(chain: Sequence[str]) -> str:
    return " -> ".join(chain)


class DependencyError(Exception):
    """Raised when a provider's dependencies cannot be discovered or resolved."""

    pass


class ParseError(DependencyError):
    """Raised when no parameter list can be located for a provider."""

    def __init__(self, provider: Any, reason: str = ""):
        self.provider = provider
        message = f"Unable to parse dependencies of {provider!r}"
        super().__init__(f"{message}: {reason}" if reason else message)


class DependencyNotFoundError(DependencyError):
    """Raised when a required dependency has no registered node.

    Attributes:
        chain: The names walked from the original request through the missing name.
        name: The missing name.
    """

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        self.name = self.chain[-1]
        super().__init__(f"Dependency not found: {format_chain(self.chain)}")


class CircularDependencyError(DependencyError):
    """Raised when a name reappears in its own resolution chain.

    Attributes:
        chain: The full chain, including any context label it was seeded with.
        cycle: The part of the chain from the first occurrence of the repeated
            name through the repeat.
    """

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        repeated = self.chain[-1]
        self.cycle = self.chain[self.chain.index(repeated):]
        super().__init__(f"Circular dependency found: {format_chain(self.chain)}")


class LoaderError(DependencyError):
    """Raised when a provider cannot be loaded from a path or import specifier."""

    pass
