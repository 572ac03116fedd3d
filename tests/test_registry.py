"""Tests for lyven.di.registry — service registry and descriptors."""

import threading

from lyven.di.registry import ServiceRegistry
from lyven.markers import ComponentKind, component, injectable


@injectable
class Repository:
    pass


@injectable(singleton=False)
class Clock:
    pass


@component(selector="user-list", providers=(Repository,))
class UserList:
    def __init__(self, repo: Repository) -> None:
        self.repo = repo


@component
class Dashboard:
    pass


class Unmarked:
    pass


class TestRegister:
    def test_component(self) -> None:
        registry = ServiceRegistry()
        descriptor = registry.register(UserList)
        assert descriptor is not None
        assert descriptor.kind is ComponentKind.COMPONENT
        assert descriptor.dependencies == (Repository,)
        assert registry.is_component(UserList)
        assert not registry.is_injectable(UserList)

    def test_injectable(self) -> None:
        registry = ServiceRegistry()
        descriptor = registry.register(Clock)
        assert descriptor is not None
        assert descriptor.singleton is False
        assert registry.is_injectable(Clock)
        assert not registry.is_component(Clock)

    def test_unmarked_ignored(self) -> None:
        registry = ServiceRegistry()
        assert registry.register(Unmarked) is None
        assert not registry.is_registered(Unmarked)
        assert len(registry) == 0

    def test_second_registration_keeps_first(self) -> None:
        registry = ServiceRegistry()
        first = registry.register(Repository)
        second = registry.register(Repository)
        assert first is second
        assert registry.registration_count == 1

    def test_token_is_dotted_name(self) -> None:
        registry = ServiceRegistry()
        descriptor = registry.register(Repository)
        assert descriptor is not None
        assert descriptor.token == f"{__name__}.Repository"


class TestQueries:
    def test_selector(self) -> None:
        registry = ServiceRegistry()
        registry.register(UserList)
        registry.register(Dashboard)
        registry.register(Repository)
        assert registry.get_selector(UserList) == "user-list"
        assert registry.get_selector(Dashboard) == "dashboard"
        assert registry.get_selector(Repository) is None

    def test_providers(self) -> None:
        registry = ServiceRegistry()
        registry.register(UserList)
        assert registry.get_providers(UserList) == (Repository,)
        assert registry.get_providers(Dashboard) == ()

    def test_snapshots_in_registration_order(self) -> None:
        registry = ServiceRegistry()
        for cls in (Dashboard, Repository, UserList, Clock):
            registry.register(cls)
        assert registry.all_registered() == (Dashboard, Repository, UserList, Clock)
        assert registry.all_components() == (Dashboard, UserList)
        assert registry.all_injectables() == (Repository, Clock)

    def test_contains_and_clear(self) -> None:
        registry = ServiceRegistry()
        registry.register(Repository)
        assert Repository in registry
        registry.clear()
        assert Repository not in registry
        assert registry.all_registered() == ()

    def test_snapshot_unaffected_by_later_registration(self) -> None:
        registry = ServiceRegistry()
        registry.register(Repository)
        snapshot = registry.all_registered()
        registry.register(Clock)
        assert snapshot == (Repository,)


class TestConcurrentRegistration:
    def test_every_type_recorded_once(self) -> None:
        registry = ServiceRegistry()
        types = [injectable(type(f"Svc{i}", (), {})) for i in range(50)]
        barrier = threading.Barrier(5)

        def worker() -> None:
            barrier.wait()
            for cls in types:
                registry.register(cls)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.registration_count == 50
        assert set(registry.all_registered()) == set(types)
