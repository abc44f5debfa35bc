"""Loading providers and values from files and import specifiers."""

import glob
import hashlib
import importlib.util
import logging
import os
import pkgutil
import sys
from types import ModuleType
from typing import Any, Callable, Iterable, Mapping, Union

from lazywire.decorators import declared_name
from lazywire.errors import LoaderError

__all__ = [
    "PROVIDER_ATTRIBUTE",
    "find_paths",
    "load_module",
    "provider_at",
    "path_providers",
    "named_specifiers",
    "import_specifier",
    "default_member",
]

logger = logging.getLogger(__name__)

PROVIDER_ATTRIBUTE = "__provider__"
"""Module attribute holding the provider a module file exports."""

EXCLUDE_PREFIX = "!"


def find_paths(patterns: Union[str, Iterable[str]]) -> list[str]:
    """Expand glob patterns into real file paths.

    Patterns are applied in order: a pattern starting with ``!`` removes its
    matches from the files matched so far. Paths keep the order in which they
    were first matched.

    Example:
        >>> find_paths(["providers/*.py", "!providers/_*.py"])
    """
    if isinstance(patterns, str):
        patterns = [patterns]

    paths: dict[str, None] = {}
    for pattern in patterns:
        if pattern.startswith(EXCLUDE_PREFIX):
            excluded = {os.path.realpath(p) for p in glob.glob(pattern[1:], recursive=True)}
            paths = {p: None for p in paths if p not in excluded}
        else:
            for match in sorted(glob.glob(pattern, recursive=True)):
                if os.path.isfile(match):
                    paths.setdefault(os.path.realpath(match), None)
    return list(paths)


def load_module(path: str) -> ModuleType:
    """Load (once) the Python module at the given path."""
    real_path = os.path.realpath(path)
    if not os.path.isfile(real_path):
        raise LoaderError(f"No module file at {path}")

    module_name = _module_name(real_path)
    if module_name in sys.modules:
        return sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, real_path)
    if spec is None or spec.loader is None:
        raise LoaderError(f"Cannot load {path} as a Python module")

    logger.debug("Loading module %s from %s", module_name, real_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[module_name]
        raise
    return module


def provider_at(path: str) -> Callable:
    """Return the provider exported by the module at ``path``.

    Raises:
        LoaderError: If the module cannot be loaded or exports no callable provider.
    """
    provider = getattr(load_module(path), PROVIDER_ATTRIBUTE, None)
    if not callable(provider):
        raise LoaderError(f"Module {path} does not define a callable {PROVIDER_ATTRIBUTE}")
    return provider


def path_providers(patterns: Union[str, Iterable[str]]) -> list[tuple[str, str, Callable]]:
    """Collect ``(default name, path, provider)`` for each module matching the patterns.

    The default name is the provider's declared name, else the file's stem.
    Modules without a callable provider are skipped.
    """
    found = []
    for path in find_paths(patterns):
        provider = getattr(load_module(path), PROVIDER_ATTRIBUTE, None)
        if not callable(provider):
            logger.debug("Skipping %s: no callable %s", path, PROVIDER_ATTRIBUTE)
            continue
        stem = os.path.splitext(os.path.basename(path))[0]
        found.append((declared_name(provider) or stem, path, provider))
    return found


def named_specifiers(specifiers: Union[Iterable[str], Mapping[str, str]]) -> list[tuple[str, str]]:
    """Pair import specifiers with the names to register them under.

    A mapping is taken as name -> specifier. Otherwise each specifier is named
    after its attribute, or the last segment of its module name.

    Example:
        >>> named_specifiers(["os.path", "json:loads"])
        [('path', 'os.path'), ('loads', 'json:loads')]
    """
    if isinstance(specifiers, Mapping):
        return list(specifiers.items())
    return [(_derived_name(specifier), specifier) for specifier in specifiers]


def import_specifier(specifier: str) -> Any:
    """Import a module, or an attribute of one given as ``module:attribute``."""
    try:
        return pkgutil.resolve_name(specifier)
    except (ImportError, AttributeError, ValueError) as e:
        raise LoaderError(f"Cannot import {specifier!r}: {e}") from e


def default_member(imported: Any) -> Any:
    """The object's ``default`` member if it has one, else the object itself."""
    default = getattr(imported, "default", None)
    return default if default is not None else imported


def _derived_name(specifier: str) -> str:
    module, _, attribute = specifier.partition(":")
    if attribute:
        return attribute.rsplit(".", 1)[-1]
    return module.rsplit(".", 1)[-1]


def _module_name(real_path: str) -> str:
    stem = os.path.splitext(os.path.basename(real_path))[0]
    digest = hashlib.sha1(real_path.encode("utf-8")).hexdigest()[:12]
    return f"lazywire_loaded_{stem}_{digest}"
