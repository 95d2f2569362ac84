#!/usr/bin/env python3
"""
Unit tests for the lazy singleton scopes.
"""

import threading
import unittest

from graphboot import (
    ConfigurationError,
    DIKey,
    FineGrainedLazySingletonScope,
    Injector,
    LazySingletonScope,
    ModuleDef,
    PlannerInput,
    Scope,
    ScopeRegistry,
)


class Connection:
    pass


class TestLazySingletonScope(unittest.TestCase):
    """Test compute-once semantics and locking of both scopes."""

    def test_provider_runs_once_under_contention(self) -> None:
        """Test that concurrent first requests share a single construction."""
        for scope in (LazySingletonScope(), FineGrainedLazySingletonScope()):
            with self.subTest(scope=type(scope).__name__):
                calls = []
                barrier = threading.Barrier(8)
                results = []

                provider = scope.scope(DIKey(Connection), lambda: calls.append(1) or Connection())

                def request():
                    barrier.wait()
                    results.append(provider())

                threads = [threading.Thread(target=request) for _ in range(8)]
                for thread in threads:
                    thread.start()
                for thread in threads:
                    thread.join()

                self.assertEqual(len(calls), 1)
                self.assertEqual(len({id(result) for result in results}), 1)

    def test_fine_grained_keys_do_not_block_each_other(self) -> None:
        """Test that a slow key does not delay an unrelated key."""
        scope = FineGrainedLazySingletonScope()
        release = threading.Event()
        started = threading.Event()

        def slow() -> str:
            started.set()
            release.wait(timeout=5)
            return "slow"

        slow_provider = scope.scope(DIKey(str, "slow"), slow)
        fast_provider = scope.scope(DIKey(str, "fast"), lambda: "fast")

        slow_thread = threading.Thread(target=slow_provider)
        slow_thread.start()
        self.assertTrue(started.wait(timeout=5))

        try:
            self.assertEqual(fast_provider(), "fast")
            self.assertFalse(scope.is_cached(DIKey(str, "slow")))
        finally:
            release.set()
            slow_thread.join()

        self.assertEqual(slow_provider(), "slow")

    def test_coarse_scope_serializes_keys(self) -> None:
        """Test that the coarse scope holds one lock for every key."""
        scope = LazySingletonScope()
        release = threading.Event()
        started = threading.Event()
        fast_done = threading.Event()

        def slow() -> str:
            started.set()
            release.wait(timeout=5)
            return "slow"

        slow_provider = scope.scope(DIKey(str, "slow"), slow)
        fast_provider = scope.scope(DIKey(str, "fast"), lambda: "fast")

        slow_thread = threading.Thread(target=slow_provider)
        fast_thread = threading.Thread(target=lambda: fast_provider() and fast_done.set())
        slow_thread.start()
        self.assertTrue(started.wait(timeout=5))
        fast_thread.start()

        self.assertFalse(fast_done.wait(timeout=0.2))
        release.set()
        slow_thread.join()
        fast_thread.join()
        self.assertTrue(fast_done.is_set())

    def test_rewrapping_is_idempotent(self) -> None:
        """Test that scoping a provider twice with the same scope returns it unchanged."""
        scope = LazySingletonScope()
        provider = scope.scope(DIKey(Connection), Connection)

        self.assertIs(scope.scope(DIKey(Connection), provider), provider)

    def test_reentrant_construction(self) -> None:
        """Test that a provider may request another key of the same scope."""
        scope = LazySingletonScope()
        inner = scope.scope(DIKey(str), lambda: "inner")
        outer = scope.scope(DIKey(int), lambda: len(inner()))

        self.assertEqual(outer(), 5)

    def test_failed_construction_is_not_cached(self) -> None:
        """Test that a failing provider is retried on the next request."""
        scope = FineGrainedLazySingletonScope()
        attempts = []

        def flaky() -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first attempt")
            return "ok"

        provider = scope.scope(DIKey(str), flaky)
        with self.assertRaises(RuntimeError):
            provider()
        self.assertEqual(provider(), "ok")


class TestScopeRegistry(unittest.TestCase):
    """Test scope installation into graphs."""

    def test_resolve_wraps_with_scope(self) -> None:
        """Test resolving a provider through the registry."""
        registry = ScopeRegistry()
        provider = registry.resolve(Scope.FINE_GRAINED_LAZY_SINGLETON, DIKey(Connection), Connection)

        self.assertIs(provider(), provider())
        with self.assertRaises(ValueError):
            registry.resolve(Scope.SINGLETON, DIKey(Connection), Connection)

    def test_default_registry_is_shared(self) -> None:
        """Test that the default registry is a process-wide instance."""
        self.assertIs(ScopeRegistry.default(), ScopeRegistry.default())
        self.assertIsNot(ScopeRegistry(), ScopeRegistry.default())

    def test_lazy_binding_in_graph(self) -> None:
        """Test that lazy singleton bindings are not constructed eagerly and then cached."""
        created = []
        module = ModuleDef()
        module.include(ScopeRegistry().module())
        module.make(Connection).in_scope(Scope.LAZY_SINGLETON).using().func(lambda: created.append(1) or Connection())

        injector = Injector()
        locator = injector.produce(injector.plan(PlannerInput([module])))

        self.assertEqual(created, [])
        self.assertIs(locator.get(Connection), locator.get(Connection))
        self.assertEqual(created, [1])

    def test_graphs_sharing_a_registry_share_instances(self) -> None:
        """Test that lazy singletons are cached per registry and key, not per graph."""
        registry = ScopeRegistry()

        def locator():
            module = ModuleDef()
            module.include(registry.module())
            module.make(Connection).in_scope(Scope.LAZY_SINGLETON).using().type(Connection)
            injector = Injector()
            return injector.produce(injector.plan(PlannerInput([module])))

        self.assertIs(locator().get(Connection), locator().get(Connection))

    def test_unbound_scope_is_rejected(self) -> None:
        """Test that planning fails when a custom scope has no implementation."""
        module = ModuleDef()
        module.make(Connection).in_scope(Scope.FINE_GRAINED_LAZY_SINGLETON).using().type(Connection)

        with self.assertRaises(ConfigurationError):
            Injector().plan(PlannerInput([module]))

    def test_builtin_scopes_cannot_be_rebound(self) -> None:
        """Test that bind_scope only accepts custom scopes."""
        with self.assertRaises(ValueError):
            ModuleDef().bind_scope(Scope.SINGLETON, LazySingletonScope())


class Settings:
    pass


class Gate:
    pass


class LazyCache:
    def __init__(self, settings: Settings):
        self.settings = settings


class CacheClient:
    def __init__(self, gate: Gate, cache: LazyCache):
        self.gate = gate
        self.cache = cache


class TestConcurrentProvisioning(unittest.TestCase):
    """Test singletons and lazy singletons provisioned from several threads."""

    def test_singleton_and_lazy_singleton_do_not_deadlock(self) -> None:
        """Test that a singleton needing a lazy key and a lazy key needing another singleton both complete."""
        lazy_started = threading.Event()
        singleton_started = threading.Event()
        observed = []

        def make_settings() -> Settings:
            lazy_started.set()
            observed.append(singleton_started.wait(timeout=5))
            return Settings()

        def make_gate() -> Gate:
            singleton_started.set()
            return Gate()

        module = ModuleDef()
        module.include(ScopeRegistry().module())
        module.make(Settings).using().func(make_settings)
        module.make(Gate).in_scope(Scope.UNSCOPED).using().func(make_gate)
        module.make(LazyCache).in_scope(Scope.LAZY_SINGLETON).using().type(LazyCache)
        module.make(CacheClient).using().type(CacheClient)

        injector = Injector()
        locator = injector.produce(injector.plan(PlannerInput([module])))
        results = {}

        lazy_thread = threading.Thread(target=lambda: results.update(cache=locator.get(LazyCache)))
        lazy_thread.start()
        self.assertTrue(lazy_started.wait(timeout=5))

        client_thread = threading.Thread(target=lambda: results.update(client=locator.get(CacheClient)))
        client_thread.start()
        lazy_thread.join(timeout=10)
        client_thread.join(timeout=10)

        self.assertFalse(lazy_thread.is_alive())
        self.assertFalse(client_thread.is_alive())
        self.assertEqual(observed, [True])
        self.assertIs(results["client"].cache, results["cache"])


if __name__ == "__main__":
    unittest.main()
