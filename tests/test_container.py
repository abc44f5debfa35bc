import uuid

import pytest

from lazywire.container import Container, ContainerRegistry, SELF_NAME, default_registry
from lazywire.decorators import inject
from lazywire.errors import DependencyNotFoundError, ParseError


@pytest.fixture
def container():
    return Container()


@pytest.fixture
def registry():
    return ContainerRegistry()


def test_container_registers_itself(container):
    assert container.is_registered(SELF_NAME)
    assert container.resolve("container") is container
    assert container.registered_names() == ["container"]


def test_provider_can_depend_on_container(container):
    container.register_value("a", 1)
    container.register("lookup", lambda container: container.resolve("a"))

    assert container.resolve("lookup") == 1


def test_registered_names_in_registration_order(container):
    container.register_value("b", 1)
    container.register("a", lambda b: b)
    container.register_value("c", 3)
    container.register_value("b", 2)

    assert container.registered_names() == ["container", "b", "a", "c"]


def test_is_registered_matches_exact_names(container):
    container.register_value("db", "sqlite")

    assert container.is_registered("db")
    assert "db" in container
    assert not container.is_registered("_db_")
    assert not container.is_registered("db?")
    assert not container.is_registered("cache")


def test_register_value_does_not_introspect_callables(container):
    def doubler(arg):
        return arg * 2

    container.register_value("doubler", doubler)

    assert container.resolve("doubler") is doubler
    assert container.resolve("doubler")(4) == 8


def test_register_value_accepts_uninspectable_values(container):
    container.register_value("answer", 42)

    assert container.resolve("answer") == 42


def test_register_non_callable_raises_parse_error(container):
    with pytest.raises(ParseError):
        container.register("answer", 42)

    assert not container.is_registered("answer")


def test_provider_not_invoked_until_resolved(container):
    calls = []
    container.register("lazy", lambda: calls.append("lazy"))

    assert calls == []
    container.resolve("lazy")
    assert calls == ["lazy"]


def test_resolve_function_returns_its_result(container):
    container.register_value("some_num", 2)
    container.register_value("other_num", 3)

    assert container.resolve(lambda some_num, other_num: some_num + other_num) == 5


def test_resolve_function_with_locals(container):
    container.register_value("a", 1)
    container.register_value("b", 2)

    def add(a, b):
        return a + b

    assert container.resolve(add, {"a": 5}) == 7


def test_resolve_function_falsy_local_falls_through_to_graph(container):
    container.register_value("a", 1)
    container.register_value("b", 2)

    def add(a, b):
        return a + b

    assert container.resolve(add, {"a": 0}) == 3
    assert container.resolve(add, {"a": None, "b": ""}) == 3


def test_resolve_function_locals_can_supply_unregistered_names(container):
    assert container.resolve(lambda request: request.upper(), {"request": "get"}) == "GET"


def test_resolve_function_locals_do_not_affect_memoized_nodes(container):
    container.register_value("a", 1)
    container.register("b", lambda a: a + 1)

    assert container.resolve(lambda b: b, {"a": 100}) == 2
    assert container.resolve("b") == 2


def test_resolve_function_is_not_memoized(container):
    calls = []
    container.register_value("a", 1)

    def work(a):
        calls.append(a)
        return a

    container.resolve(work)
    container.resolve(work)

    assert calls == [1, 1]


def test_resolve_function_uses_explicit_dependencies(container):
    container.register_value("database", "sqlite")

    @inject("database", "cache?")
    def describe(db, cache):
        return (db, cache)

    assert container.resolve(describe) == ("sqlite", None)


def test_resolve_function_with_shadowed_parameters(container):
    container.register_value("db", "sqlite")

    assert container.resolve(lambda _db_: _db_) == "sqlite"
    assert container.resolve(lambda _db_: _db_, {"db": "postgres"}) == "postgres"


def test_resolve_function_missing_dependency_uses_context(container):
    with pytest.raises(DependencyNotFoundError, match="handler -> missing"):
        container.resolve(lambda missing: missing, context="handler")


def test_resolve_class_constructs_instance(container):
    class Handler:
        def __init__(self, db):
            self.db = db

    container.register_value("db", "sqlite")

    first = container.resolve(Handler)
    second = container.resolve(Handler)

    assert isinstance(first, Handler)
    assert first.db == "sqlite"
    assert first is not second


def test_resolve_rejects_other_targets(container):
    with pytest.raises(TypeError, match="Cannot resolve"):
        container.resolve(42)


def test_provides_decorator_infers_names(container):
    @container.provides()
    def make_database():
        return "db"

    @container.provides()
    class Service:
        def __init__(self, database):
            self.database = database

    @container.provides(name="custom")
    def whatever():
        return "custom"

    @container.provides()
    @inject(name="declared")
    def make_other():
        return "other"

    assert container.registered_names() == ["container", "database", "Service", "custom", "declared"]
    assert container.resolve("Service").database == "db"
    assert container.resolve("declared") == "other"
    assert make_database() == "db"


def test_containers_without_key_are_independent():
    first = Container()
    second = Container()
    first.register_value("a", 1)

    assert first is not second
    assert not second.is_registered("a")


def test_registry_returns_existing_container(registry):
    first = Container.named("app", registry)
    first.register_value("a", 1)
    second = Container.named("app", registry)

    assert second is first
    assert second.resolve("a") == 1
    assert first.key == "app"
    assert "app" in registry
    assert registry.keys() == ["app"]


def test_registry_keys_are_distinct(registry):
    assert registry.get_or_create("one") is not registry.get_or_create("two")
    assert registry.get("three") is None


def test_registry_discard_and_clear(registry):
    first = registry.get_or_create("app")
    registry.discard("app")

    assert "app" not in registry
    assert registry.get_or_create("app") is not first

    registry.clear()
    assert registry.keys() == []


def test_default_registry_is_process_wide():
    key = str(uuid.uuid4())
    try:
        assert Container.named(key) is Container.named(key)
        assert default_registry.get(key) is Container.named(key)
    finally:
        default_registry.discard(key)


def test_container_subclass_in_registry(registry):
    class AppContainer(Container):
        pass

    assert isinstance(AppContainer.named("app", registry), AppContainer)


def test_keys_are_only_assigned_by_a_registry(registry):
    with pytest.raises(TypeError):
        Container("app")

    assert Container().key is None
    assert Container.named("app", registry) is Container.named("app", registry)
    assert Container.named("app", registry).key == "app"


def test_builtin_subclass_without_constructor_is_registered(container):
    class Settings(dict):
        pass

    container.register("settings", Settings)
    settings = container.resolve("settings")

    assert isinstance(settings, Settings)
    assert settings == {}
    assert container.resolve("settings") is settings
