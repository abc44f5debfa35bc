"""Container operations bound to a fresh container per test.

``load_test_globals`` places every public :class:`~lazywire.container.Container`
operation into a namespace (usually a test module's globals). Each test gets a
new container, discarded when the test ends:

    >>> from lazywire.testing import load_test_globals
    >>> bindings = load_test_globals(globals())
    >>> lazywire_container = bindings.fixture()
    >>>
    >>> def test_sum():
    ...     register_value("a", 1)
    ...     register("double", lambda a: a * 2)
    ...     assert resolve("double") == 2

Called while no container exists (at import time, say), an operation returns
a zero-argument callable that performs it later instead of running it.
"""

import inspect
import logging
from typing import Any, Callable, Optional

import pytest

from lazywire.container import Container

__all__ = ["TestBindings", "load_test_globals"]

logger = logging.getLogger(__name__)


class TestBindings:
    """Operations bound to whichever container is current."""

    __test__ = False

    def __init__(self, factory: Callable[[], Container] = Container):
        self._factory = factory
        self.container: Optional[Container] = None

    def setup(self) -> None:
        self.container = self._factory()

    def teardown(self) -> None:
        self.container = None

    def bind(self, operation_name: str) -> Callable:
        """Return a function applying the named operation to the current container."""

        def operation(*args, **kwargs) -> Any:
            def work():
                return getattr(self.container, operation_name)(*args, **kwargs)

            return work() if self.container is not None else work

        operation.__name__ = operation_name
        operation.__doc__ = getattr(Container, operation_name).__doc__
        return operation

    def operations(self) -> dict[str, Callable]:
        return {name: self.bind(name) for name in public_operations()}

    def fixture(self) -> Callable:
        """An autouse pytest fixture giving each test a fresh container."""

        @pytest.fixture(autouse=True)
        def lazywire_container():
            self.setup()
            yield self.container
            self.teardown()

        return lazywire_container


def public_operations() -> list[str]:
    """Names of the container's public instance operations."""
    return [
        name
        for name, member in inspect.getmembers(Container, inspect.isfunction)
        if not name.startswith("_")
    ]


def load_test_globals(
    namespace: dict[str, Any],
    before: Optional[Callable[[Callable], Any]] = None,
    after: Optional[Callable[[Callable], Any]] = None,
) -> TestBindings:
    """Expose container operations in ``namespace``.

    Args:
        namespace: The mapping to add the operations to, e.g. ``globals()``.
        before: Registers a function to run before each test. If omitted, use
            the fixture returned by :meth:`TestBindings.fixture`.
        after: Registers a function to run after each test.

    Returns:
        The bindings the operations act through.
    """
    bindings = TestBindings()
    namespace.update(bindings.operations())
    if before is not None:
        before(bindings.setup)
    if after is not None:
        after(bindings.teardown)
    logger.debug("Bound container operations %s", sorted(bindings.operations()))
    return bindings
