"""Base metrics implementation using a Prometheus client."""
import os
from prometheus_client import Counter, Gauge

# Global metrics configuration
METRICS_ENABLED = bool(os.getenv("ENABLE_METRICS", "false").lower() == "true")


class MetricsFactory:
    """Factory for creating metrics with consistent naming."""

    @staticmethod
    def counter(name, description, labels=None):
        """Create a counter-metric."""
        return Counter(
            name=f"chainzmq_{name}",
            documentation=description,
            labelnames=labels or []
        ) if METRICS_ENABLED else DummyCounter(name, description, labels)

    @staticmethod
    def gauge(name, description, labels=None):
        """Create a gauge metric."""
        return Gauge(
            name=f"chainzmq_{name}",
            documentation=description,
            labelnames=labels or []
        ) if METRICS_ENABLED else DummyGauge(name, description, labels)


# Fake implementations for when metrics are disabled
class DummyMetric:
    def __init__(self, name, description, labels=None):
        self.name = name
        self.description = description

    def labels(self, **kwargs):
        return self


class DummyCounter(DummyMetric):
    def inc(self, amount=1):
        pass


class DummyGauge(DummyMetric):
    def inc(self, amount=1):
        pass

    def dec(self, amount=1):
        pass

    def set(self, value):
        pass
