from flask import Blueprint, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    PlatformCollector,
    generate_latest,
)
from prometheus_client.core import Counter, GaugeMetricFamily, Histogram
from prometheus_client.multiprocess import MultiProcessCollector
from sqlalchemy import case, select

from models import count_groups, naive_utcnow
from models.schedule.metadata import MetadataKey, OwnerKind
from models.schedule.show import Timeslot

metrics = Blueprint("metric", __name__)

request_duration = Histogram("myury_request_duration_seconds", "Request duration", ["endpoint", "method"])
request_total = Counter("myury_request_total", "Total request count", ["endpoint", "method", "http_status"])


def gauge_groups(gauge, query, *entities, labels=()):
    for count, *key in count_groups(query, *entities):
        gauge.add_metric([*labels, *key], count)


class ExternalMetrics:
    def __init__(self, registry=None):
        if registry is not None:
            registry.register(self)

    def collect(self):
        myury_metadata = GaugeMetricFamily(
            "myury_metadata_values", "Schedule metadata values", labels=["owner", "key", "state"]
        )
        myury_timeslots = GaugeMetricFamily("myury_timeslots", "Booked timeslots", labels=["state"])

        now = naive_utcnow()
        for kind in OwnerKind:
            model = kind.value_model
            state = case(
                (model.effective_from > now, "pending"),
                ((model.effective_to.is_not(None)) & (model.effective_to <= now), "closed"),
                else_="current",
            )
            gauge_groups(
                myury_metadata,
                select(model).select_from(model).join(MetadataKey, MetadataKey.id == model.key_id),
                MetadataKey.name,
                state,
                labels=[str(kind)],
            )

        gauge_groups(
            myury_timeslots,
            select(Timeslot).select_from(Timeslot),
            case((Timeslot.end_time <= now, "past"), else_="upcoming"),
        )

        return [myury_metadata, myury_timeslots]


@metrics.route("/metrics")
def collect_metrics():
    registry = CollectorRegistry()
    MultiProcessCollector(registry)
    PlatformCollector(registry)
    ExternalMetrics(registry)

    data = generate_latest(registry)

    return Response(data, mimetype=CONTENT_TYPE_LATEST)
