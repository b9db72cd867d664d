"""Tests for thread safety of provider caching and production."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from tests.helpers import Dependency, StubContext
from wirekit.exceptions import NoUsableConstructorError
from wirekit.lock_mode import LockMode
from wirekit.markers import Injected, inject
from wirekit.plan import AssemblyPlan, InjectionPlanResolver
from wirekit.providers import ComponentProvider, ComponentProviderCache, provider_for


class ServiceA:
    dependency: Injected[Dependency]


class ServiceB:
    @inject
    def __init__(self, dependency: Dependency) -> None:
        self.dependency = dependency


class RequiresArguments:
    def __init__(self, value: int) -> None:
        self.value = value


class CountingResolver(InjectionPlanResolver):
    def __init__(self) -> None:
        self.calls = 0
        self._calls_lock = threading.Lock()

    def resolve(self, descriptor) -> AssemblyPlan:  # noqa: ANN001
        with self._calls_lock:
            self.calls += 1
        return super().resolve(descriptor)


class TestProviderCache:
    def test_returns_same_provider_for_same_type(
        self,
        provider_cache: ComponentProviderCache,
    ) -> None:
        first = provider_cache.get(ServiceA)
        second = provider_cache.get(ServiceA)

        assert first is second
        assert ServiceA in provider_cache
        assert len(provider_cache) == 1

    def test_failed_provider_is_not_cached(self, provider_cache: ComponentProviderCache) -> None:
        for _ in range(2):
            with pytest.raises(NoUsableConstructorError):
                provider_cache.get(RequiresArguments)

        assert RequiresArguments not in provider_cache

    def test_clear_drops_providers(self, provider_cache: ComponentProviderCache) -> None:
        provider_cache.get(ServiceA)

        provider_cache.clear()

        assert len(provider_cache) == 0

    def test_default_lock_mode_is_thread(self, provider_cache: ComponentProviderCache) -> None:
        assert provider_cache.lock_mode is LockMode.THREAD

    def test_provider_for_uses_process_wide_cache(self) -> None:
        assert provider_for(ServiceB) is provider_for(ServiceB)


class TestConcurrentAccess:
    def test_concurrent_first_requests_build_one_plan(self) -> None:
        resolver = CountingResolver()
        cache = ComponentProviderCache(lock_mode=LockMode.THREAD, resolver=resolver)
        barrier = threading.Barrier(10)

        def get_provider() -> ComponentProvider[ServiceB]:
            barrier.wait()
            return cache.get(ServiceB)

        with ThreadPoolExecutor(max_workers=10) as executor:
            providers = list(executor.map(lambda _: get_provider(), range(10)))

        assert resolver.calls == 1
        assert all(provider is providers[0] for provider in providers)

    def test_unlocked_cache_still_returns_working_providers(self) -> None:
        cache = ComponentProviderCache(lock_mode=LockMode.NONE)
        context = StubContext({Dependency: Dependency()})

        with ThreadPoolExecutor(max_workers=8) as executor:
            services = list(
                executor.map(lambda _: cache.get(ServiceB).produce(context), range(20)),
            )

        assert len({id(service) for service in services}) == 20
        assert ServiceB in cache

    def test_concurrent_produce_creates_distinct_instances(self) -> None:
        dependency = Dependency()
        context = StubContext({Dependency: dependency})
        provider = ComponentProvider(ServiceA)
        results: list[ServiceA] = []
        errors: list[Exception] = []

        def produce() -> None:
            try:
                results.append(provider.produce(context))
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=produce) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len({id(result) for result in results}) == 10
        assert all(result.dependency is dependency for result in results)
