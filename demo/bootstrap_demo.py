#!/usr/bin/env python3
"""
Demo of a two-phase build driven by markers on an entry-point class.

The bootstrap graph is built first from marker-referenced suites and
bootstrap modules; the final graph replays its bindings together with
every application module.
"""

import logging
from dataclasses import dataclass

from graphboot import (
    Bootstrap,
    BootstrapModule,
    GraphBuilder,
    Marker,
    ModuleDef,
    Scope,
    StaticScanner,
    Suite,
    auto_bind_singleton,
)

logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")


class MetricsSettings:
    def __init__(self, prefix: str):
        self.prefix = prefix


class MetricsBootstrapModule(BootstrapModule):
    """Bootstrap module configured by the marker that references it."""

    def __init__(self, marker: "EnableMetrics"):
        super().__init__()
        print(f"[bootstrap] metrics prefix {marker.prefix!r}")
        self.make(MetricsSettings).using().value(MetricsSettings(marker.prefix))


@Bootstrap(bootstrap_module=MetricsBootstrapModule)
@dataclass(frozen=True)
class EnableMetrics(Marker):
    prefix: str = "app"


class Counter:
    def __init__(self, settings: MetricsSettings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger
        self.values: dict[str, int] = {}

    def increment(self, name: str) -> None:
        key = f"{self.settings.prefix}.{name}"
        self.values[key] = self.values.get(key, 0) + 1
        self.logger.info(f"{key} = {self.values[key]}")


@auto_bind_singleton
class InvoiceService:
    def __init__(self, counter: Counter):
        self.counter = counter

    def issue(self, customer: str) -> str:
        self.counter.increment("invoices")
        return f"invoice for {customer}"


class MetricsModule(ModuleDef):
    """Created through the bootstrap graph, so it can inject MetricsSettings."""

    def __init__(self, settings: MetricsSettings):
        super().__init__()
        print(f"[modules] installing metrics for {settings.prefix!r}")
        self.make(Counter).in_scope(Scope.LAZY_SINGLETON).using().type(Counter)


class BillingSuite(Suite):
    def configure(self, builder: GraphBuilder) -> None:
        print("[suite] configuring billing")
        builder.with_module_classes(MetricsModule).using_scanner(StaticScanner([InvoiceService]))


@Bootstrap(suite=BillingSuite)
@dataclass(frozen=True)
class EnableBilling(Marker):
    pass


@EnableBilling()
@EnableMetrics(prefix="billing")
class BillingApp:
    pass


def main() -> None:
    print("Two-phase build demo")
    print("=" * 40)

    graph = GraphBuilder().for_entry_point(BillingApp).build()

    print("\nUsing the final graph:")
    print("-" * 40)
    service = graph.locator.get(InvoiceService)
    print(service.issue("ACME"))
    print(service.issue("Globex"))
    print(f"Counter values: {graph.locator.get(Counter).values}")
    print(f"Build state: {graph.state.name}")


if __name__ == "__main__":
    main()
