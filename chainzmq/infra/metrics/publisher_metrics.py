# chainzmq/infra/metrics/publisher_metrics.py
"""
Publisher Metrics - Prometheus series for the ZMQ bridge.

Enabled with ENABLE_METRICS=true; otherwise every series is a no-op.
"""

from chainzmq.infra.metrics.prometheus import MetricsFactory

messages_published_total = MetricsFactory.counter(
    "messages_published_total",
    "Messages handed to the transport",
    labels=["topic"],
)

bytes_published_total = MetricsFactory.counter(
    "bytes_published_total",
    "Payload bytes handed to the transport (topic frame excluded)",
    labels=["topic"],
)

events_dropped_total = MetricsFactory.counter(
    "events_dropped_total",
    "Node events ignored because the publisher was closed",
    labels=["event"],
)

transport_errors_total = MetricsFactory.counter(
    "transport_errors_total",
    "Bind, unbind and send failures",
    labels=["operation"],
)

endpoints_bound = MetricsFactory.gauge(
    "endpoints_bound",
    "Endpoints currently bound",
)
