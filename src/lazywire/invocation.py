"""Invocation of providers with their resolved dependencies."""

import logging
from typing import Any, Optional, Sequence

from lazywire.domain import ProviderKind

__all__ = ["invoke"]

logger = logging.getLogger(__name__)


def invoke(provider: Any, arguments: Sequence[Any], kind: Optional[ProviderKind] = None) -> Any:
    """Invoke a provider, binding the arguments positionally.

    Constructible providers (classes) are instantiated and the new instance is
    returned; any other callable is called and its result returned. An unset
    provider produces ``None``.

    Args:
        provider: The class or callable to invoke, or None.
        arguments: Resolved dependencies, in declaration order.
        kind: How to invoke the provider. Detected from the provider if omitted.

    Returns:
        The new instance or the callable's result.
    """
    if provider is None:
        return None

    kind = kind or ProviderKind.of(provider)
    if kind is ProviderKind.CONSTRUCTIBLE:
        logger.debug("Constructing %s with %d argument(s)", _describe(provider), len(arguments))
        instance = provider(*arguments)
        return instance

    logger.debug("Calling %s with %d argument(s)", _describe(provider), len(arguments))
    return provider(*arguments)


def _describe(provider: Any) -> str:
    return getattr(provider, "__qualname__", None) or repr(provider)
