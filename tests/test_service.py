from __future__ import annotations

import json
import logging
from urllib.parse import parse_qs, urlsplit

import pytest

from dingbridge.config import Config, MessageTemplates, Mention, Target
from dingbridge.models import Alert, WebhookMessage
from dingbridge.notifier import DingTalkTransport, NotificationService, TransportError, UnknownTargetError
from dingbridge.template import TemplateError

from test_transport import FakeResponse, FakeSession

_OK = {"errcode": 0, "errmsg": "ok"}


def _config(**target_kwargs) -> Config:
    target = Target(
        name="ops",
        url="https://oapi.dingtalk.com/robot/send?access_token=abc",
        **target_kwargs,
    )
    return Config(
        targets={"ops": target},
        default_message=MessageTemplates(
            title="{{ GroupLabels.alertname }}",
            text="{% for alert in Alerts %}{{ alert.Annotations.payload }}{% endfor %}",
        ),
    )


def _message(*sizes: int) -> WebhookMessage:
    return WebhookMessage(
        status="firing",
        groupLabels={"alertname": "Demo"},
        alerts=[Alert(annotations={"payload": "x" * size}) for size in sizes],
    )


def test_notify_sends_single_notification() -> None:
    session = FakeSession(FakeResponse(200, _OK))
    service = NotificationService(_config(), transport=DingTalkTransport(session))

    responses = service.notify("ops", _message(5, 5))

    assert [response.ok for response in responses] == [True]
    body = json.loads(session.calls[0]["data"])
    assert body == {"msgtype": "markdown", "markdown": {"title": "Demo", "text": "x" * 10}}
    assert session.calls[0]["url"] == "https://oapi.dingtalk.com/robot/send?access_token=abc"


def test_notify_signs_each_request(monkeypatch) -> None:
    timestamps = iter(["1000", "2000"])
    monkeypatch.setattr("dingbridge.notifier.signer.current_timestamp", lambda: next(timestamps))
    session = FakeSession(FakeResponse(200, _OK), FakeResponse(200, _OK))
    service = NotificationService(_config(secret="SEC000"), transport=DingTalkTransport(session), limit=150)

    service.notify("ops", _message(60, 60))

    queries = [parse_qs(urlsplit(call["url"]).query) for call in session.calls]
    assert [query["timestamp"] for query in queries] == [["1000"], ["2000"]]
    assert all("sign" in query and query["access_token"] == ["abc"] for query in queries)


def test_notify_delivers_batches_in_alert_order() -> None:
    session = FakeSession(*(FakeResponse(200, _OK) for _ in range(3)))
    service = NotificationService(_config(), transport=DingTalkTransport(session), limit=150)

    responses = service.notify("ops", _message(30, 50, 60, 70))

    assert len(responses) == 3
    texts = [json.loads(call["data"])["markdown"]["text"] for call in session.calls]
    assert texts == ["x" * 80, "x" * 60, "x" * 70]


def test_notify_includes_mentions_in_every_batch() -> None:
    session = FakeSession(FakeResponse(200, _OK), FakeResponse(200, _OK))
    service = NotificationService(
        _config(mention=Mention(all=True)),
        transport=DingTalkTransport(session),
        limit=250,
    )

    service.notify("ops", _message(100, 100))

    assert [json.loads(call["data"])["at"] for call in session.calls] == [{"isAtAll": True, "atMobiles": []}] * 2


def test_notify_logs_and_returns_rejections(caplog) -> None:
    session = FakeSession(FakeResponse(200, {"errcode": 300001, "errmsg": "token is not exist"}))
    service = NotificationService(_config(), transport=DingTalkTransport(session))

    with caplog.at_level(logging.WARNING, logger="dingbridge.notifier.service"):
        responses = service.notify("ops", _message(5))

    assert responses[0].error_code == 300001
    assert "token is not exist" in caplog.text
    assert "access_token=abc" not in caplog.text


def test_notify_stops_at_first_delivery_failure() -> None:
    session = FakeSession(FakeResponse(200, _OK), FakeResponse(500), FakeResponse(200, _OK))
    service = NotificationService(_config(), transport=DingTalkTransport(session), limit=150)

    with pytest.raises(TransportError) as excinfo:
        service.notify("ops", _message(60, 60, 60))

    assert excinfo.value.status_code == 500
    assert len(session.calls) == 2


def test_notify_sends_nothing_when_rendering_fails() -> None:
    session = FakeSession()
    config = _config(message=MessageTemplates(text="{{ Alerts[0].Nope }}"))
    service = NotificationService(config, transport=DingTalkTransport(session))

    with pytest.raises(TemplateError):
        service.notify("ops", _message(5))

    assert session.calls == []


def test_unknown_target_raises() -> None:
    service = NotificationService(_config(), transport=DingTalkTransport(FakeSession()))

    with pytest.raises(UnknownTargetError):
        service.notify("missing", _message(5))
    assert service.targets == ["ops"]


def test_render_returns_batches_without_sending() -> None:
    session = FakeSession()
    service = NotificationService(_config(), transport=DingTalkTransport(session), limit=150)

    batches = service.render("ops", _message(60, 60))

    assert [(batch.start, batch.end) for batch in batches] == [(0, 1), (1, 2)]
    assert session.calls == []


def test_service_loads_template_files(tmp_path) -> None:
    template_path = tmp_path / "custom.tmpl"
    template_path.write_text("custom {{ Status }}", encoding="utf-8")
    config = _config(message=MessageTemplates(title='{% include "custom.tmpl" %}'))
    config.templates = [template_path]
    session = FakeSession(FakeResponse(200, _OK))

    NotificationService(config, transport=DingTalkTransport(session)).notify("ops", _message(1))

    assert json.loads(session.calls[0]["data"])["markdown"]["title"] == "custom firing"
