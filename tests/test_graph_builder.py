#!/usr/bin/env python3
"""
Unit tests for the two-phase build: GraphBuilder, replay and LifecycleGraph.
"""

import logging
import unittest
from dataclasses import dataclass

from graphboot import (
    Bootstrap,
    BootstrapModule,
    BuildState,
    DIKey,
    GraphBuilder,
    Locator,
    Marker,
    ModuleDef,
    ProvisionError,
    ReplayExclusions,
    Scanner,
    Scope,
    ScopeRegistry,
    Stage,
    StaticScanner,
    Suite,
    bootstrap,
)


class Settings:
    def __init__(self):
        self.dsn = "postgres://localhost"


class Secret:
    pass


class Database:
    def __init__(self, settings: Settings):
        self.settings = settings


class SettingsBootstrapModule(BootstrapModule):
    def __init__(self):
        super().__init__()
        self.make(Settings).using().type(Settings)
        self.make(Secret).using().type(Secret)


class DatabaseModule(ModuleDef):
    """A module created through the bootstrap graph."""

    def __init__(self, settings: Settings):
        super().__init__()
        self.settings = settings
        self.make(Database).using().type(Database)


def isolated() -> GraphBuilder:
    return GraphBuilder().without_auto_binding().with_scope_registry(ScopeRegistry())


class TestReplay(unittest.TestCase):
    """Test replay of bootstrap bindings into the final graph."""

    def test_bootstrap_instances_are_shared(self) -> None:
        """Test that the final graph hands out the instance the bootstrap graph built."""
        modules = []
        graph = (
            isolated()
            .with_bootstrap_modules(SettingsBootstrapModule())
            .with_module_classes(DatabaseModule)
            .with_module_transformers(lambda ms: modules.extend(ms) or ms)
            .build()
        )

        database_module = next(m for m in modules if isinstance(m, DatabaseModule))
        self.assertIs(graph.locator.get(Settings), database_module.settings)
        self.assertIs(graph.locator.get(Database).settings, database_module.settings)

    def test_bootstrap_services_are_available(self) -> None:
        """Test that lifecycle services and the scanner reach the final graph."""
        scanner = StaticScanner([])
        graph = isolated().using_scanner(scanner).in_stage(Stage.DEVELOPMENT).build()

        self.assertIs(graph.locator.get(Scanner), scanner)
        self.assertIs(graph.scanner, scanner)
        self.assertEqual(graph.locator.get(Stage), Stage.DEVELOPMENT)

    def test_final_graph_binds_its_own_locator(self) -> None:
        """Test that Locator resolves to the final graph, not the bootstrap graph."""
        graph = isolated().build()

        self.assertIs(graph.locator.get(Locator), graph.locator)

    def test_custom_exclusions(self) -> None:
        """Test that excluded types stay in the bootstrap graph."""
        exclusions = ReplayExclusions().with_types(Secret)
        locator = (
            isolated()
            .with_bootstrap_modules(SettingsBootstrapModule())
            .with_replay_exclusions(exclusions)
            .build()
            .locator
        )

        self.assertFalse(locator.has(Secret))
        self.assertTrue(locator.has(Settings))

    def test_loggers_are_not_replayed(self) -> None:
        """Test that a logger bound for bootstrap is not handed to the final graph."""

        class Worker:
            def __init__(self, logger: logging.Logger):
                self.logger = logger

        bootstrap_module = BootstrapModule()
        bootstrap_module.make(logging.Logger).using().value(logging.getLogger("bootstrap"))
        module = ModuleDef()
        module.make(Worker).using().type(Worker)

        locator = isolated().with_bootstrap_modules(bootstrap_module).with_modules(module).build().locator

        self.assertNotEqual(locator.get(Worker).logger.name, "bootstrap")

    def test_lazy_scope_survives_replay(self) -> None:
        """Test that a lazy bootstrap binding is still built at most once."""
        created = []
        bootstrap_module = BootstrapModule()
        bootstrap_module.make(Settings).in_scope(Scope.LAZY_SINGLETON).using().func(
            lambda: created.append(1) or Settings()
        )

        locator = isolated().with_bootstrap_modules(bootstrap_module).build().locator

        self.assertEqual(created, [])
        self.assertIs(locator.get(Settings), locator.get(Settings))
        self.assertEqual(created, [1])

    def test_default_exclusions(self) -> None:
        """Test which keys are excluded by default."""
        exclusions = ReplayExclusions()
        self.assertTrue(exclusions.excludes(DIKey(Stage)))
        self.assertTrue(exclusions.excludes(DIKey(DatabaseModule)))
        self.assertTrue(exclusions.excludes(DIKey(logging.LoggerAdapter)))
        self.assertFalse(exclusions.excludes(DIKey(Settings)))
        self.assertFalse(exclusions.excludes(DIKey(set[Stage])))


class TestModuleList(unittest.TestCase):
    """Test collection and ordering of plain modules."""

    def test_entry_point_module_is_last(self) -> None:
        """Test that an entry point subclassing ModuleDef overrides other modules."""

        class App(ModuleDef):
            def __init__(self):
                super().__init__()
                self.make(str).using().value("app")

        defaults = ModuleDef()
        defaults.make(str).using().value("defaults")

        locator = isolated().with_modules(defaults).for_entry_point(App).build().locator

        self.assertEqual(locator.get(str), "app")

    def test_bootstrap_module_includes_modules(self) -> None:
        """Test that bootstrap modules can add plain modules."""
        bootstrap_module = SettingsBootstrapModule()
        bootstrap_module.include_module(DatabaseModule)

        locator = isolated().with_bootstrap_modules(bootstrap_module).build().locator

        self.assertIsInstance(locator.get(Database), Database)

    def test_excluded_module_class(self) -> None:
        """Test that excluded module classes are not installed."""
        locator = (
            isolated()
            .with_bootstrap_modules(SettingsBootstrapModule())
            .with_module_classes(DatabaseModule)
            .excluding_module_classes(DatabaseModule)
            .build()
            .locator
        )

        self.assertFalse(locator.has(Database))

    def test_module_creation_failure_names_module(self) -> None:
        """Test that a failing module constructor aborts the build."""

        class BrokenModule(ModuleDef):
            def __init__(self):
                raise RuntimeError("cannot configure")

        with self.assertRaises(ProvisionError) as ctx:
            isolated().with_module_classes(BrokenModule).build()

        self.assertIn("BrokenModule", str(ctx.exception))

    def test_transformers_run_in_order(self) -> None:
        """Test that each transformer sees the previous one's output."""
        extra = ModuleDef()
        extra.make(int).using().value(7)
        seen = []

        def add_extra(modules):
            return [*modules, extra]

        def record(modules):
            seen.append(len(modules))
            return modules

        locator = isolated().with_module_transformers(record, add_extra, record).build().locator

        self.assertEqual(seen, [0, 1])
        self.assertEqual(locator.get(int), 7)


class TestSuites(unittest.TestCase):
    """Test suites configuring the builder."""

    def test_suite_runs_before_modules_are_collected(self) -> None:
        """Test that suites configure the builder before modules are finalized."""
        events = []

        class RecordingModule(ModuleDef):
            def __init__(self):
                super().__init__()
                events.append("module")

        class RecordingSuite(Suite):
            def configure(self, builder: GraphBuilder) -> None:
                events.append("suite")
                builder.with_module_classes(RecordingModule)
                builder.with_module_transformers(lambda modules: events.append("transformer") or modules)

        @Bootstrap(suite=RecordingSuite)
        @dataclass(frozen=True)
        class EnableRecording(Marker):
            pass

        @EnableRecording()
        class App:
            pass

        isolated().for_entry_point(App).build()

        self.assertEqual(events, ["suite", "module", "transformer"])

    def test_suites_do_not_change_the_callers_builder(self) -> None:
        """Test that build() works on a copy of the builder."""

        class AddingSuite(Suite):
            def configure(self, builder: GraphBuilder) -> None:
                builder.with_modules(ModuleDef())

        @Bootstrap(suite=AddingSuite)
        @dataclass(frozen=True)
        class EnableAdding(Marker):
            pass

        @EnableAdding()
        class App:
            pass

        builder = isolated().for_entry_point(App)
        builder.build()
        builder.build()

        self.assertEqual(builder.module_list.includes, [])


class TestLifecycleGraph(unittest.TestCase):
    """Test post-build actions, build states and deprecated entry points."""

    def test_post_build_actions_run_in_order(self) -> None:
        """Test that actions receive the final locator in order."""
        calls = []
        graph = (
            isolated()
            .with_post_build_actions(lambda locator: calls.append(("first", locator)))
            .with_post_build_actions(lambda locator: calls.append(("second", locator)))
            .build()
        )

        self.assertEqual([name for name, _ in calls], ["first", "second"])
        self.assertTrue(all(locator is graph.locator for _, locator in calls))
        self.assertEqual(graph.state, BuildState.ACTIONS_RUN)

    def test_failing_action_aborts_build(self) -> None:
        """Test that the first failing action stops the build."""
        calls = []

        def fail(locator):
            raise RuntimeError("not ready")

        builder = isolated().with_post_build_actions(fail, lambda locator: calls.append("after"))

        with self.assertLogs("graphboot.lifecycle_graph", level="ERROR"):
            with self.assertRaises(RuntimeError):
                builder.build()

        self.assertEqual(calls, [])

    def test_create_child_graph_is_deprecated(self) -> None:
        """Test the deprecated child graph entry point."""
        parent_module = ModuleDef()
        parent_module.make(Settings).using().type(Settings)
        graph = isolated().with_modules(parent_module).build()

        child_module = ModuleDef()
        child_module.make(Database).using().type(Database)

        with self.assertWarns(DeprecationWarning):
            child = graph.create_child_graph(child_module)

        self.assertIs(child.get(Database).settings, graph.locator.get(Settings))


@Bootstrap(bootstrap_module=SettingsBootstrapModule)
@dataclass(frozen=True)
class EnableSettings(Marker):
    pass


class TestBootstrapFunction(unittest.TestCase):
    """Test the bootstrap() shortcut."""

    def test_bootstrap_returns_final_locator(self) -> None:
        """Test building from an entry point with explicit bootstrap modules."""

        @EnableSettings()
        class App(ModuleDef):
            def __init__(self):
                super().__init__()
                self.make(Database).using().type(Database)

        extra = BootstrapModule()
        extra.make(int).using().value(3)

        locator = bootstrap(App, None, extra)

        self.assertIsInstance(locator.get(Database).settings, Settings)
        self.assertEqual(locator.get(int), 3)


if __name__ == "__main__":
    unittest.main()
