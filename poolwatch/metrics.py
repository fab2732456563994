"""
Gauge registration.

Gauges are described with a small builder and handed to a MetricsSink. The
Prometheus sink computes each value when the registry is scraped, so the
scrape interval is the sampling schedule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping, Protocol

import prometheus_client
from prometheus_client import CollectorRegistry

Source = Callable[[], float]


@dataclass(frozen=True)
class GaugeDescriptor:
    name: str
    source: Source
    base_unit: str = ""
    description: str = ""
    tags: tuple[tuple[str, str], ...] = ()


class MetricsSink(Protocol):
    def register_gauge(self, descriptor: GaugeDescriptor) -> None:
        ...

    def register_collector(self, collector) -> None:
        ...


class GaugeBuilder:
    def __init__(self, name: str, source: Source):
        self._name = name
        self._source = source
        self._base_unit = ""
        self._description = ""
        self._tags: dict[str, str] = {}

    def base_unit(self, unit: str) -> GaugeBuilder:
        self._base_unit = unit
        return self

    def description(self, text: str) -> GaugeBuilder:
        self._description = text
        return self

    def tag(self, key: str, value: str) -> GaugeBuilder:
        self._tags[key] = value
        return self

    def tags(self, tags: Mapping[str, str]) -> GaugeBuilder:
        self._tags.update(tags)
        return self

    def build(self) -> GaugeDescriptor:
        return GaugeDescriptor(
            name=self._name,
            source=self._source,
            base_unit=self._base_unit,
            description=self._description,
            tags=tuple(self._tags.items()),
        )

    def register(self, sink: MetricsSink) -> GaugeDescriptor:
        descriptor = self.build()
        sink.register_gauge(descriptor)
        return descriptor


class Gauge:
    @staticmethod
    def builder(name: str, source: Source) -> GaugeBuilder:
        return GaugeBuilder(name, source)


def prometheus_name(name: str) -> str:
    """'pool.threads.connectionCount' -> 'pool_threads_connection_count'"""
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()
    return re.sub(r"[^a-z0-9_:]", "_", snake)


class PrometheusSink:
    """
    Backs gauge descriptors with prometheus_client gauges.

    One gauge family per metric name. Each registration under that name
    adds a labelled series, so every tag set is readable on its own.
    """

    def __init__(self, registry: CollectorRegistry):
        self.registry = registry
        self._families: dict[str, tuple[prometheus_client.Gauge, tuple[str, ...]]] = {}

    def register_collector(self, collector) -> None:
        self.registry.register(collector)

    def register_gauge(self, descriptor: GaugeDescriptor) -> None:
        name = prometheus_name(descriptor.name)
        labels = dict(descriptor.tags)
        labelnames = tuple(labels)

        if name in self._families:
            gauge, known = self._families[name]
            if set(known) != set(labelnames):
                raise ValueError(
                    f"gauge {descriptor.name} already registered with tags {sorted(known)}, "
                    f"got {sorted(labelnames)}"
                )
        else:
            gauge = prometheus_client.Gauge(
                name,
                descriptor.description or descriptor.name,
                labelnames=labelnames,
                unit=descriptor.base_unit,
                registry=self.registry,
            )
            self._families[name] = (gauge, labelnames)

        if labels:
            gauge.labels(**labels).set_function(descriptor.source)
        else:
            gauge.set_function(descriptor.source)
