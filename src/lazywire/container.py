"""The container: registration and resolution of named providers.

A :class:`Container` owns one dependency graph. Providers are registered by
name; what each one needs is read from its signature when it is registered,
and nothing is invoked until a name is resolved:

    >>> container = Container()
    >>> container.register_value("a", 1)
    >>> container.register_value("b", 2)
    >>> container.register("sum", lambda a, b: a + b)
    >>> container.resolve("sum")
    3

Containers may be shared under an identity key through a
:class:`ContainerRegistry`; :meth:`Container.named` uses the process-wide
:data:`default_registry` unless given another.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from lazywire import loaders
from lazywire.decorators import declared_name, inferred_name
from lazywire.graph import DependencyGraph, Node
from lazywire.invocation import invoke
from lazywire.resolution import Resolver
from lazywire.signature import parse_dependencies

__all__ = ["Container", "ContainerRegistry", "default_registry", "SELF_NAME"]

logger = logging.getLogger(__name__)

SELF_NAME = "container"
"""The name under which every container registers itself."""


class Container:
    """Registry of named providers and values, resolved lazily and at most once.

    Attributes:
        key: The identity key the container is shared under, if any. Only a
            ContainerRegistry assigns it; containers constructed directly are
            never shared.
        graph: The container's dependency graph.
    """

    def __init__(self):
        self.key: Optional[str] = None
        self.graph = DependencyGraph()
        self._resolver = Resolver(self.graph)
        self.register_value(SELF_NAME, self)

    @classmethod
    def named(cls, key: str, registry: Optional["ContainerRegistry"] = None) -> "Container":
        """Return the container shared under ``key``, creating it if necessary.

        Args:
            key: The identity key.
            registry: The registry to look the key up in; defaults to
                :data:`default_registry`.
        """
        return (registry if registry is not None else default_registry).get_or_create(key, cls)

    def register(self, name: str, provider: Callable) -> None:
        """Register a provider under a name, replacing any existing node.

        Args:
            name: The name to register.
            provider: A function or class. Its dependencies are read from its
                ``__inject__`` list or its signature.

        Raises:
            ParseError: If the provider's dependencies cannot be determined.

        Example:
            >>> container.register("greeter", lambda prefix: lambda n: prefix + n)
        """
        dependencies = parse_dependencies(provider)
        self.graph[name] = Node.for_provider(provider, dependencies)
        logger.debug(
            "Registered provider %r depending on %s", name, [str(d) for d in dependencies]
        )

    def register_value(self, name: str, value: Any) -> None:
        """Register a fixed value under a name, replacing any existing node.

        The value is used verbatim, even if it is callable.
        """
        self.graph[name] = Node.for_value(value)
        logger.debug("Registered value %r", name)

    def provides(self, name: Optional[str] = None) -> Callable:
        """Decorator to register a function or class as a provider.

        Args:
            name: Optional name to register under; defaults to the provider's
                declared name, else its class name or function name with any
                'make_' prefix removed.

        Example:
            @container.provides()
            def make_database(url):
                return Database(url)
        """

        def decorator(obj):
            self.register(name or declared_name(obj) or inferred_name(obj), obj)
            return obj

        return decorator

    def is_registered(self, name: str) -> bool:
        """Whether a node exists for exactly this name."""
        return name in self.graph

    def __contains__(self, name: str) -> bool:
        return self.is_registered(name)

    def registered_names(self) -> list[str]:
        """All registered names, in registration order."""
        return self.graph.names()

    def resolve(
        self,
        target: Union[str, list, tuple, Callable],
        locals: Optional[Mapping[str, Any]] = None,
        context: Optional[str] = None,
    ) -> Any:
        """Resolve a name, a list of names, or the dependencies of a function.

        Names wrapped in single underscores (``_db_``) resolve as the unwrapped
        name. A trailing ``?`` makes a name optional: if nothing is registered
        under it, None is returned instead of raising.

        Args:
            target: A name, a list or tuple of names, or a callable. A callable
                has its dependencies resolved and is invoked with them.
            locals: Values used in place of registered nodes for the requested
                names. Falsy values are ignored and the graph is used instead.
            context: A label prefixed to the resolution chain in error messages.

        Returns:
            The resolved value; a list of values, in request order, for a list
            or tuple of names; or the callable's result.

        Raises:
            DependencyNotFoundError: If a required name is not registered.
            CircularDependencyError: If a name depends on itself.
            ParseError: If a callable's dependencies cannot be determined.

        Example:
            >>> container.resolve("log")
            >>> fs, log = container.resolve(["fs", "log"])
            >>> container.resolve(lambda some_num, other_num: some_num + other_num, {"other_num": 5})
        """
        if isinstance(target, str):
            return self._resolver.resolve_request(target, locals, context)
        if isinstance(target, (list, tuple)):
            return self._resolver.resolve_requests(target, locals, context)
        if callable(target):
            dependencies = parse_dependencies(target)
            arguments = self._resolver.resolve_requests(dependencies, locals, context)
            return invoke(target, arguments)
        raise TypeError(f"Cannot resolve {target!r}: expected a name, names or a callable")

    def resolve_path(
        self,
        path: str,
        locals: Optional[Mapping[str, Any]] = None,
        context: Optional[str] = None,
    ) -> Any:
        """Resolve the provider defined in the module at ``path``.

        Relative paths are taken from the current directory. The path is used
        as the context unless another is given.

        Raises:
            LoaderError: If the file cannot be loaded or defines no provider.
        """
        provider = loaders.provider_at(path)
        return self.resolve(provider, locals, context or str(path))

    def register_path(
        self,
        patterns: Union[str, Iterable[str]],
        name_maker: Optional[Callable[[str, str, Callable], Optional[str]]] = None,
    ) -> None:
        """Register the providers of every module matching the given pattern(s).

        Each matching file's ``__provider__`` attribute is registered under its
        declared name or, failing that, the file's stem. Files without a
        callable ``__provider__`` are skipped.

        Args:
            patterns: A glob pattern or patterns. ``**`` matches recursively;
                patterns starting with ``!`` exclude files.
            name_maker: Called with the default name, the file's path and the
                provider; a truthy result replaces the default name.

        Example:
            >>> container.register_path(["services/**/*.py", "!**/test_*.py"])
        """
        for default_name, path, provider in loaders.path_providers(patterns):
            name = (name_maker and name_maker(default_name, path, provider)) or default_name
            self.register(name, provider)

    def register_requires(self, requirements: Union[Iterable[str], Mapping[str, str]]) -> None:
        """Import modules and register them as values.

        Args:
            requirements: Module names, each registered under its last dotted
                segment, or a mapping from names to module names.

        Example:
            >>> container.register_requires({"json": "json", "sqlite": "sqlite3"})
        """
        for name, specifier in loaders.named_specifiers(requirements):
            self.register_value(name, loaders.import_specifier(specifier))

    def register_imports(self, imports: Union[Iterable[str], Mapping[str, str]]) -> None:
        """Import objects and register them, or their ``default`` member, as values.

        Specifiers are module names optionally followed by ``:attribute``.
        """
        for name, specifier in loaders.named_specifiers(imports):
            self.register_value(name, loaders.default_member(loaders.import_specifier(specifier)))

    def __repr__(self) -> str:
        return f"Container(key={self.key!r}, names={self.registered_names()!r})"


class ContainerRegistry:
    """Containers shared under identity keys.

    Looking a key up creates the container the first time and returns the
    same instance afterwards, until the key is discarded.
    """

    def __init__(self):
        self._containers: dict[str, Container] = {}

    def get_or_create(self, key: str, factory: Callable[[], Container] = Container) -> Container:
        if key not in self._containers:
            logger.debug("Creating container %r", key)
            container = factory()
            container.key = key
            self._containers[key] = container
        return self._containers[key]

    def get(self, key: str) -> Optional[Container]:
        return self._containers.get(key)

    def discard(self, key: str) -> None:
        self._containers.pop(key, None)

    def clear(self) -> None:
        self._containers.clear()

    def keys(self) -> list[str]:
        return list(self._containers)

    def __contains__(self, key: str) -> bool:
        return key in self._containers


default_registry = ContainerRegistry()
"""The process-wide registry used by :meth:`Container.named`."""
