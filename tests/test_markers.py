#!/usr/bin/env python3
"""
Unit tests for markers, bootstrap descriptors and marker resolution.
"""

import unittest
from dataclasses import dataclass

from graphboot import (
    Bootstrap,
    BootstrapModule,
    ConfigurationError,
    GraphBuilder,
    Marker,
    ModuleDef,
    Suite,
    get_marker,
    markers_of,
)
from graphboot.markers import BootstrapModuleRole, MarkerResolver, ModuleRole, SuiteRole


class Greeting:
    def __init__(self, text: str):
        self.text = text


class GreetingModule(ModuleDef):
    def __init__(self, marker: "EnableGreeting"):
        super().__init__()
        self.make(Greeting).using().value(Greeting(f"hello {marker.audience}"))


class MetricsSettings:
    def __init__(self, prefix: str):
        self.prefix = prefix


class MetricsBootstrapModule(BootstrapModule):
    def __init__(self, marker: "EnableMetrics"):
        super().__init__()
        self.make(MetricsSettings).using().value(MetricsSettings(marker.prefix))


class TracingSuite(Suite):
    configured = 0

    def configure(self, builder: GraphBuilder) -> None:
        TracingSuite.configured += 1
        module = ModuleDef()
        module.make(str).named("tracing").using().value("on")
        builder.with_modules(module)


@Bootstrap(module=GreetingModule)
@dataclass(frozen=True)
class EnableGreeting(Marker):
    audience: str = "world"


@Bootstrap(bootstrap_module=MetricsBootstrapModule)
@dataclass(frozen=True)
class EnableMetrics(Marker):
    prefix: str = "app"


@Bootstrap(suite=TracingSuite)
@dataclass(frozen=True)
class EnableTracing(Marker):
    pass


@Bootstrap(suite=TracingSuite)
@dataclass(frozen=True)
class EnableTracingToo(Marker):
    pass


@Bootstrap(suite=TracingSuite, module=GreetingModule)
@dataclass(frozen=True)
class Ambiguous(Marker):
    pass


@dataclass(frozen=True)
class Plain(Marker):
    pass


class TestMarkers(unittest.TestCase):
    """Test how markers are recorded on classes."""

    def test_markers_keep_declaration_order(self) -> None:
        """Test that markers are listed top to bottom."""

        @EnableGreeting()
        @Plain()
        @EnableMetrics(prefix="x")
        class App:
            pass

        self.assertEqual([type(m) for m in markers_of(App)], [EnableGreeting, Plain, EnableMetrics])
        self.assertEqual(get_marker(App, EnableMetrics), EnableMetrics(prefix="x"))

    def test_markers_are_not_inherited(self) -> None:
        """Test that subclasses do not carry their parent's markers."""

        @Plain()
        class Parent:
            pass

        class Child(Parent):
            pass

        self.assertEqual(markers_of(Child), ())
        self.assertIsNone(get_marker(Child, Plain))

    def test_bootstrap_roles(self) -> None:
        """Test that descriptors map markers to their roles."""
        greeting = EnableGreeting()
        metrics = EnableMetrics()
        tracing = EnableTracing()

        self.assertEqual(Bootstrap.of(EnableGreeting).role(greeting), ModuleRole(greeting, GreetingModule))
        self.assertEqual(
            Bootstrap.of(EnableMetrics).role(metrics), BootstrapModuleRole(metrics, MetricsBootstrapModule)
        )
        self.assertEqual(Bootstrap.of(EnableTracing).role(tracing), SuiteRole(tracing, TracingSuite))
        self.assertIsNone(Bootstrap.of(Plain))

    def test_more_than_one_role_is_rejected(self) -> None:
        """Test that a descriptor declaring two roles is a configuration error."""
        with self.assertRaises(ConfigurationError):
            Bootstrap.of(Ambiguous).role(Ambiguous())


class TestMarkerResolver(unittest.TestCase):
    """Test resolution of entry-point markers."""

    def test_resolve_splits_roles(self) -> None:
        """Test that markers are sorted into suites, bootstrap modules and modules."""
        resolved = MarkerResolver().resolve([EnableTracing(), Plain(), EnableMetrics(), EnableGreeting()])

        self.assertEqual(resolved.suites, [TracingSuite])
        self.assertEqual(resolved.bootstrap_modules, [MetricsBootstrapModule])
        self.assertEqual(resolved.module_classes, [GreetingModule])
        self.assertEqual(len(resolved.augmentations), 2)
        self.assertEqual(len(resolved.markers), 3)

    def test_shared_suite_is_listed_once(self) -> None:
        """Test that a suite referenced by two markers is configured once."""
        resolved = MarkerResolver().resolve([EnableTracing(), EnableTracingToo()])

        self.assertEqual(resolved.suites, [TracingSuite])

    def test_resolve_logs_discoveries(self) -> None:
        """Test that discovered markers are reported at INFO."""
        with self.assertLogs("graphboot.markers", level="INFO") as logs:
            MarkerResolver().resolve([EnableMetrics()])

        self.assertTrue(any("MetricsBootstrapModule" in line for line in logs.output))

    def test_marker_locator_injects_marker_values(self) -> None:
        """Test that marker-referenced classes can inject the marker instance."""
        resolved = MarkerResolver().resolve([EnableMetrics(prefix="billing")])
        locator = MarkerResolver().marker_locator(resolved)

        module = locator.create(MetricsBootstrapModule)

        self.assertEqual(module.bindings[0].functoid.value.prefix, "billing")


class TestMarkersInBuild(unittest.TestCase):
    """Test markers driving a full build."""

    def setUp(self) -> None:
        TracingSuite.configured = 0

    def test_entry_point_markers_contribute_bindings(self) -> None:
        """Test every marker role contributing to the final graph."""

        @EnableTracing()
        @EnableTracingToo()
        @EnableMetrics(prefix="billing")
        @EnableGreeting(audience="billing")
        class BillingApp:
            pass

        locator = GraphBuilder().for_entry_point(BillingApp).build().locator

        self.assertEqual(locator.get(MetricsSettings).prefix, "billing")
        self.assertEqual(locator.get(Greeting).text, "hello billing")
        self.assertEqual(locator.get(str, "tracing"), "on")
        self.assertEqual(locator.get(EnableMetrics), EnableMetrics(prefix="billing"))
        self.assertEqual(TracingSuite.configured, 1)

    def test_external_module_is_visible_to_suites(self) -> None:
        """Test that suites can inject bindings of the external module."""
        seen = []

        class Settings:
            pass

        class SettingsSuite(Suite):
            def __init__(self, settings: Settings):
                self.settings = settings

            def configure(self, builder: GraphBuilder) -> None:
                seen.append(self.settings)

        @Bootstrap(suite=SettingsSuite)
        @dataclass(frozen=True)
        class EnableSettings(Marker):
            pass

        @EnableSettings()
        class App:
            pass

        settings = Settings()
        external = ModuleDef()
        external.make(Settings).using().value(settings)

        GraphBuilder().for_entry_point(App, external).build()

        self.assertEqual(seen, [settings])

    def test_ambiguous_marker_aborts_build(self) -> None:
        """Test that an ambiguous marker on the entry point fails the build."""

        @Ambiguous()
        class App:
            pass

        with self.assertRaises(ConfigurationError):
            GraphBuilder().for_entry_point(App).build()


if __name__ == "__main__":
    unittest.main()
