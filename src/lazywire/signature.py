"""Discovery of the dependencies a provider declares.

Dependencies are read, in order of precedence, from:

    - an explicit ``__inject__`` list (see :func:`lazywire.decorators.inject`);
    - the provider's signature, via :func:`inspect.signature`. For classes the
      constructor's parameters are used.

Within a signature each positional parameter is one dependency. The parameter
name is the dependency name unless the parameter is annotated with
``Annotated[T, "name"]``. A dependency is optional when its name ends in
``?`` or when the parameter is preceded by an ``# optional`` comment line:

    >>> def make_service(
    ...     db,
    ...     # optional
    ...     cache,
    ... ):
    ...     ...
    >>> parse_dependencies(make_service)
    [DependencyRef(name='db', optional=False), DependencyRef(name='cache', optional=True)]
"""

import inspect
import io
import logging
import re
import textwrap
import tokenize
from typing import Any, Annotated, Callable, get_args, get_origin, get_type_hints

from lazywire.decorators import INJECT_ATTRIBUTE
from lazywire.domain import DependencyRef
from lazywire.errors import ParseError

__all__ = ["parse_dependencies"]

logger = logging.getLogger(__name__)

_OPTIONAL_COMMENT = re.compile(r"^#\s*optional\s*$", re.IGNORECASE)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

_OPENING = "([{"
_CLOSING = ")]}"


def parse_dependencies(provider: Any) -> list[DependencyRef]:
    """Extract the ordered dependency references of a provider.

    Args:
        provider: A function, class or other callable.

    Returns:
        One DependencyRef per declared dependency, in declaration order.

    Raises:
        ParseError: If the provider has no parameter list that can be inspected.
    """
    explicit = getattr(provider, INJECT_ATTRIBUTE, None)
    if explicit is not None:
        return [DependencyRef.parse(name) for name in explicit]

    if not callable(provider):
        raise ParseError(provider, "not callable")

    declaration = _declaration(provider)
    if declaration is None:
        return []

    try:
        signature = inspect.signature(provider)
    except (TypeError, ValueError) as e:
        raise ParseError(provider, str(e)) from e

    hints = _type_hints(declaration)
    commented_optional = _commented_optional_names(declaration)

    dependencies = []
    for parameter in signature.parameters.values():
        if parameter.kind not in _POSITIONAL:
            continue
        ref = _make_dependency(hints.get(parameter.name, parameter.annotation), parameter.name)
        if parameter.name in commented_optional and not ref.optional:
            ref = DependencyRef(ref.name, True)
        dependencies.append(ref)
    return dependencies


def _declaration(provider: Any) -> Any:
    """The callable whose source and annotations describe the provider's parameters.

    Returns None for classes that do not define a constructor, including
    subclasses of builtin types that only inherit the builtin one.
    """
    if not inspect.isclass(provider):
        return provider
    if not any(
        "__init__" in vars(klass) for klass in provider.__mro__ if klass.__module__ != "builtins"
    ):
        return None
    return provider.__init__


def _type_hints(declaration: Any) -> dict[str, Any]:
    try:
        return get_type_hints(declaration, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations.
        return {}


def _make_dependency(annotation, name) -> DependencyRef:
    if get_origin(annotation) is Annotated:
        _, *metadata = get_args(annotation)
        qualifier = next((m for m in metadata if isinstance(m, str)), None)
        if qualifier:
            return DependencyRef.parse(qualifier)
    return DependencyRef.parse(name)


def _commented_optional_names(declaration: Callable) -> set[str]:
    """Names of parameters preceded by an ``# optional`` comment line."""
    try:
        source = textwrap.dedent(inspect.getsource(declaration))
    except (OSError, TypeError):
        return set()

    names = set()
    depth = 0
    seen_def = False
    in_parameters = False
    awaiting_name = False
    marked = False
    try:
        for token in tokenize.generate_tokens(io.StringIO(source).readline):
            if not in_parameters:
                if token.type == tokenize.NAME and token.string == "def":
                    seen_def = True
                elif seen_def and token.type == tokenize.OP and token.string == "(":
                    in_parameters = True
                    depth = 1
                    awaiting_name = True
                continue

            if token.type == tokenize.OP and token.string in _OPENING:
                depth += 1
            elif token.type == tokenize.OP and token.string in _CLOSING:
                depth -= 1
                if depth == 0:
                    break
            elif depth != 1:
                continue
            elif token.type == tokenize.OP and token.string == ",":
                awaiting_name = True
            elif token.type == tokenize.COMMENT:
                if token.line.strip().startswith("#") and _OPTIONAL_COMMENT.match(token.string):
                    marked = True
            elif token.type == tokenize.NAME and awaiting_name:
                if marked:
                    names.add(token.string)
                marked = False
                awaiting_name = False
    except (tokenize.TokenError, SyntaxError):
        logger.debug("Could not tokenize source of %r", declaration)
    return names
