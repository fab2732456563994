import logging
from collections import Counter

from prometheus_client.core import GaugeMetricFamily

from poolwatch.metrics import MetricsSink, prometheus_name
from poolwatch.threads import ThreadInspector, ThreadState

logger = logging.getLogger(__name__)

RUNNABLE_GAUGE = "worker.threads.runnable"
STATES_GAUGE = "worker.threads.states"


class ThreadUtilizationSampler:
    """
    Counts the process threads currently in a given scheduling state.

    The count is a racy snapshot: threads change state while the table is
    being read and nothing here locks against that.
    """

    def __init__(self, inspector: ThreadInspector):
        self.inspector = inspector

    def counts(self) -> Counter:
        """Thread count per state, all taken from a single snapshot."""
        try:
            threads = self.inspector.snapshot()
        except Exception:
            # scrapes read 0 rather than fail
            logger.debug("Thread enumeration unavailable", exc_info=True)
            return Counter()
        return Counter(t.state for t in threads)

    def count(self, state: ThreadState) -> int:
        return self.counts()[state]

    def sample(self) -> int:
        return self.count(ThreadState.RUNNABLE)

    def bind(self, sink: MetricsSink) -> None:
        sink.register_collector(ThreadStatesCollector(self))


class ThreadStatesCollector:
    """
    Exports the runnable gauge and the per-state gauges. Every scrape takes
    one snapshot, so the per-state series always add up to the same table.
    """

    def __init__(self, sampler: ThreadUtilizationSampler):
        self.sampler = sampler

    def _families(self):
        runnable = GaugeMetricFamily(
            prometheus_name(RUNNABLE_GAUGE),
            "The number of threads in the runnable state",
            unit="threads",
        )
        states = GaugeMetricFamily(
            prometheus_name(STATES_GAUGE),
            "The number of threads per scheduling state",
            labels=["state"],
            unit="threads",
        )
        return runnable, states

    def describe(self):
        return list(self._families())

    def collect(self):
        counts = self.sampler.counts()
        runnable, states = self._families()
        runnable.add_metric([], counts[ThreadState.RUNNABLE])
        for state in ThreadState:
            states.add_metric([state.value], counts[state])
        yield runnable
        yield states
