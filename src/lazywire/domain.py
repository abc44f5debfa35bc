"""Domain models used throughout the framework."""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = ["DependencyRef", "ProviderKind", "OPTIONAL_MARKER"]

OPTIONAL_MARKER = "?"


@dataclass(frozen=True)
class DependencyRef:
    """A dependency declared by a provider.

    Attributes:
        name: The name of the node that fulfils this dependency.
        optional: Whether a missing node resolves to ``None`` instead of raising.
    """

    name: str
    optional: bool = False

    @staticmethod
    def parse(declared: str) -> "DependencyRef":
        """Build a reference from a declared name, honouring a trailing ``?``.

        Example:
            >>> DependencyRef.parse("cache?")
            DependencyRef(name='cache', optional=True)
        """
        if declared.endswith(OPTIONAL_MARKER):
            return DependencyRef(declared[: -len(OPTIONAL_MARKER)], True)
        return DependencyRef(declared, False)

    def __str__(self) -> str:
        return self.name + OPTIONAL_MARKER if self.optional else self.name


class ProviderKind(Enum):
    """How a provider is invoked to produce its value."""

    CALLABLE = "callable"
    CONSTRUCTIBLE = "constructible"

    @staticmethod
    def of(provider: Any) -> "ProviderKind":
        if inspect.isclass(provider):
            return ProviderKind.CONSTRUCTIBLE
        return ProviderKind.CALLABLE
