"""Pydantic models for Alertmanager webhook payloads and DingTalk robot messages."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AlertStatus = Literal["firing", "resolved"]


class Alert(BaseModel):
    """A single alert as delivered in an Alertmanager webhook."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    status: AlertStatus = "firing"
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str = ""


class WebhookMessage(BaseModel):
    """A grouped Alertmanager notification.

    ``alerts`` keeps the order in which Alertmanager grouped the alerts. A
    message can be projected onto a contiguous slice of its alerts with
    :meth:`with_alerts`; every other field is shared by the projection.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    version: str = "4"
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    status: AlertStatus = "firing"
    receiver: str = ""
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")
    alerts: tuple[Alert, ...] = ()

    def with_alerts(self, alerts: Sequence[Alert]) -> WebhookMessage:
        return self.model_copy(update={"alerts": tuple(alerts)})


class DingTalkMarkdown(BaseModel):
    title: str
    text: str


class DingTalkAt(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_at_all: bool = Field(default=False, alias="isAtAll")
    at_mobiles: list[str] = Field(default_factory=list, alias="atMobiles")


class DingTalkNotification(BaseModel):
    """Robot message body posted to DingTalk."""

    model_config = ConfigDict(populate_by_name=True)

    msgtype: Literal["markdown"] = "markdown"
    markdown: DingTalkMarkdown
    at: DingTalkAt | None = None


class DingTalkResponse(BaseModel):
    """Robot API reply. DingTalk answers HTTP 200 even for rejected messages, with ``errcode != 0``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    error_code: int = Field(alias="errcode")
    error_message: str = Field(default="", alias="errmsg")

    @property
    def ok(self) -> bool:
        return self.error_code == 0
