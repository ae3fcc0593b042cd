"""Read-only views of a webhook message, shaped like Alertmanager's template data.

User templates written against Alertmanager's notification data refer to
``Status``, ``Alerts.Firing``, ``Labels.SortedPairs`` and so on. The classes
here expose exactly those names on top of :mod:`dingbridge.models`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, NamedTuple

from ..models import Alert, WebhookMessage


class Pair(NamedTuple):
    Name: str
    Value: str


class Pairs(list):
    """Name/value pairs, sorted by name."""

    @property
    def Names(self) -> list[str]:
        return [pair.Name for pair in self]

    @property
    def Values(self) -> list[str]:
        return [pair.Value for pair in self]


class KV(dict):
    """Label or annotation set. Missing keys read as the empty string."""

    def __missing__(self, key: str) -> str:
        return ""

    @property
    def SortedPairs(self) -> Pairs:
        return Pairs(Pair(name, self[name]) for name in sorted(self))

    @property
    def Names(self) -> list[str]:
        return self.SortedPairs.Names

    @property
    def Values(self) -> list[str]:
        return self.SortedPairs.Values

    def Remove(self, names: Iterable[str] | str) -> KV:
        if isinstance(names, str):
            names = [names]
        excluded = set(names)
        return KV({key: value for key, value in self.items() if key not in excluded})


@dataclass(frozen=True)
class AlertData:
    Status: str
    Labels: KV
    Annotations: KV
    StartsAt: datetime | None
    EndsAt: datetime | None
    GeneratorURL: str
    Fingerprint: str

    @classmethod
    def from_alert(cls, alert: Alert) -> AlertData:
        return cls(
            Status=alert.status,
            Labels=KV(alert.labels),
            Annotations=KV(alert.annotations),
            StartsAt=alert.starts_at,
            EndsAt=alert.ends_at,
            GeneratorURL=alert.generator_url,
            Fingerprint=alert.fingerprint,
        )


class Alerts(list):
    @property
    def Firing(self) -> Alerts:
        return Alerts(alert for alert in self if alert.Status == "firing")

    @property
    def Resolved(self) -> Alerts:
        return Alerts(alert for alert in self if alert.Status == "resolved")


@dataclass(frozen=True)
class Data:
    Receiver: str
    Status: str
    Alerts: Alerts
    GroupLabels: KV
    CommonLabels: KV
    CommonAnnotations: KV
    ExternalURL: str
    Version: str
    GroupKey: str
    TruncatedAlerts: int

    @classmethod
    def from_message(cls, message: WebhookMessage) -> Data:
        return cls(
            Receiver=message.receiver,
            Status=message.status,
            Alerts=Alerts(AlertData.from_alert(alert) for alert in message.alerts),
            GroupLabels=KV(message.group_labels),
            CommonLabels=KV(message.common_labels),
            CommonAnnotations=KV(message.common_annotations),
            ExternalURL=message.external_url,
            Version=message.version,
            GroupKey=message.group_key,
            TruncatedAlerts=message.truncated_alerts,
        )

    def as_context(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def template_context(data: WebhookMessage | Data | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, WebhookMessage):
        return Data.from_message(data).as_context()
    if isinstance(data, Data):
        return data.as_context()
    return dict(data)
