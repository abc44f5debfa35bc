"""Lazywire dependency injection runtime.

Lazywire is a small, in-process dependency injection container. Providers
(functions or classes) are registered by name, and what each one needs is read
from its parameter names when it is registered. Nothing is built until a name
is resolved; each provider is then invoked at most once per container and its
result reused.

Key Features:
    - Dependencies discovered from signatures, ``Annotated`` names or an
      explicit ``@inject`` list
    - Optional dependencies (``cache?``) that resolve to None when missing
    - Lazy, memoized resolution with cycle detection and full error chains
    - Function-based resolution with local overrides
    - Containers shared by key through an explicit registry

Basic Usage:
    >>> from lazywire.container import Container
    >>>
    >>> container = Container()
    >>> container.register_value("url", "sqlite://")
    >>>
    >>> @container.provides()
    >>> def make_database(url) -> Database:
    ...     return Database(url)
    >>>
    >>> db = container.resolve("database")

The package consists of several modules:
    - container: The Container facade and the keyed ContainerRegistry
    - signature: Discovery of provider dependencies
    - resolution: Recursive, memoizing resolution
    - graph: Per-container node storage
    - invocation: Invoking functions and constructing classes
    - loaders: Registering providers from files and import specifiers
    - testing: Container operations bound per test, for pytest
    - errors: Framework-specific exceptions
"""
