from __future__ import annotations

import logging
from dataclasses import dataclass

from ..models import WebhookMessage
from .builder import MAX_MESSAGE_LENGTH, NotificationBuilder

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Batch:
    """Serialized notification for the alerts ``[start, end)`` of a message."""

    start: int
    end: int
    body: bytes

    @property
    def size(self) -> int:
        return len(self.body)


def split(
    builder: NotificationBuilder,
    message: WebhookMessage,
    limit: int = MAX_MESSAGE_LENGTH,
) -> list[Batch]:
    """Split a message into notifications that each serialize to fewer than ``limit`` bytes.

    Alerts are taken left to right and a batch grows one alert at a time,
    re-rendering the whole range after each step, until the next alert would
    push it to ``limit``. The batch is then cut and the overflowing alert
    starts the next one. An alert that alone reaches ``limit`` is sent on its
    own, oversized. Batches never reorder, overlap or drop alerts.

    Any rendering error aborts the split; nothing is returned for delivery.
    """
    alerts = message.alerts
    body = builder.render_body(message)
    if len(body) < limit or not alerts:
        return [Batch(0, len(alerts), body)]

    LOGGER.debug(
        "Notification for target %s is %d bytes (limit %d); splitting %d alerts",
        builder.target.name,
        len(body),
        limit,
        len(alerts),
    )

    batches: list[Batch] = []
    best: Batch | None = None
    start = 0
    end = 1
    while end <= len(alerts):
        candidate = Batch(start, end, builder.render_body(message.with_alerts(alerts[start:end])))
        if candidate.size < limit:
            best = candidate
            end += 1
            continue

        if best is not None:
            batches.append(best)
            best = None
            # Re-render the overflowing alert on its own before extending again.
            start = end - 1
            continue

        LOGGER.warning(
            "Alert %d alone renders to %d bytes (limit %d) for target %s; sending it oversized",
            start,
            candidate.size,
            limit,
            builder.target.name,
        )
        batches.append(candidate)
        start = end
        end += 1

    if best is not None:
        batches.append(best)

    LOGGER.debug("Split %d alerts into %d batches for target %s", len(alerts), len(batches), builder.target.name)
    return batches
