"""Decorators attaching injection metadata to providers."""

import inspect
from typing import Any, Callable, Optional

__all__ = ["inject", "inferred_name", "declared_name"]

INJECT_ATTRIBUTE = "__inject__"
NAME_ATTRIBUTE = "__inject_name__"


def set_metadata(target: Any, **attributes) -> Any:
    for attribute, value in attributes.items():
        setattr(target, attribute, value)
    return target


def inject(*dependencies: str, name: Optional[str] = None) -> Callable:
    """Declare a provider's dependencies and/or name explicitly.

    Explicit dependency names replace whatever would otherwise be read from
    the provider's signature. A trailing ``?`` marks a dependency optional.

    Args:
        dependencies: Ordered names of the provider's dependencies. If none are
            given the signature is still used.
        name: Default name to register the provider under.

    Example:
        >>> @inject("db", "cache?", name="users")
        ... def make_user_service(database, cache):
        ...     return UserService(database, cache)
    """

    def decorator(target: Any) -> Any:
        if dependencies:
            set_metadata(target, **{INJECT_ATTRIBUTE: list(dependencies)})
        if name:
            set_metadata(target, **{NAME_ATTRIBUTE: name})
        return target

    return decorator


def declared_name(target: Any) -> Optional[str]:
    return getattr(target, NAME_ATTRIBUTE, None)


def inferred_name(target: Any) -> str:
    """Derive a provider name from a class or function name.

    Args:
        target: The function or class to derive a name from.

    Returns:
        The class name, or the function name with any 'make_' prefix removed.

    Example:
        >>> inferred_name(Database)       # Returns "Database"
        >>> inferred_name(make_database)  # Returns "database"
        >>> inferred_name(my_service)     # Returns "my_service"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    else:
        return target.__name__
