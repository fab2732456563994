import fnmatch
import logging
import math

from anyio import CapacityLimiter

from poolwatch.metrics import Gauge, MetricsSink

logger = logging.getLogger(__name__)

CONNECTION_COUNT_GAUGE = "pool.threads.connectionCount"
MAX_CONNECTIONS_GAUGE = "pool.threads.maxConnections"


class LimiterPool:
    """Exposes an AnyIO capacity limiter as a worker pool."""

    def __init__(self, limiter: CapacityLimiter):
        self.limiter = limiter

    @property
    def connection_count(self) -> int:
        return self.limiter.borrowed_tokens

    @property
    def max_connections(self) -> float:
        return self.limiter.total_tokens


class PoolRegistry:
    """Named worker pools whose attributes can be looked up by name."""

    def __init__(self):
        self._pools = {}

    def register(self, name: str, pool) -> None:
        self._pools[name] = pool

    def unregister(self, name: str) -> None:
        self._pools.pop(name, None)

    def query_names(self, pattern: str = "*") -> list[str]:
        return sorted(n for n in self._pools if fnmatch.fnmatchcase(n, pattern))

    def get_attribute(self, name: str, attribute: str):
        pool = self._pools[name]
        return getattr(pool, attribute)


def read_float(pools: PoolRegistry, name: str, attribute: str) -> float:
    try:
        return float(str(pools.get_attribute(name, attribute)))
    except Exception:
        return math.nan


def bind_pool_gauges(pools: PoolRegistry, sink: MetricsSink, pattern: str = "*") -> list[str]:
    logger.info("Registering worker pool metrics")

    names = pools.query_names(pattern)
    for name in names:
        tags = {"name": name}
        (
            Gauge.builder(CONNECTION_COUNT_GAUGE, lambda n=name: read_float(pools, n, "connection_count"))
            .base_unit("connections")
            .description("Current number of busy connections in the worker pool")
            .tags(tags)
            .register(sink)
        )
        (
            Gauge.builder(MAX_CONNECTIONS_GAUGE, lambda n=name: read_float(pools, n, "max_connections"))
            .base_unit("connections")
            .description("Maximum number of concurrent connections of the worker pool")
            .tags(tags)
            .register(sink)
        )
        logger.info(f"Registered metrics for worker pool {name}")

    return names
