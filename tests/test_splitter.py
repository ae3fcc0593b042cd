from __future__ import annotations

import pytest

from dingbridge.config import MessageTemplates, Target
from dingbridge.models import Alert, WebhookMessage
from dingbridge.notifier import MAX_MESSAGE_LENGTH, NotificationBuilder, split
from dingbridge.template import Template, TemplateError

# The text is just the alerts' payloads back to back, so body size = overhead + sum(payload sizes).
_PAYLOAD_TEXT = "{% for alert in Alerts %}{{ alert.Annotations.payload }}{% endfor %}"


def _builder(text: str = _PAYLOAD_TEXT) -> NotificationBuilder:
    target = Target(
        name="ops",
        url="https://oapi.dingtalk.com/robot/send?access_token=abc",
        message=MessageTemplates(title="t", text=text),
    )
    return NotificationBuilder(Template(), target)


def _message(*sizes: int) -> WebhookMessage:
    alerts = [
        Alert(labels={"index": str(index)}, annotations={"payload": "x" * size})
        for index, size in enumerate(sizes)
    ]
    return WebhookMessage(status="firing", alerts=alerts)


def _overhead(builder: NotificationBuilder) -> int:
    return len(builder.render_body(_message()))


def _assert_covers(batches, count: int) -> None:
    indices = [index for batch in batches for index in range(batch.start, batch.end)]
    assert indices == list(range(count))
    assert all(batch.end > batch.start for batch in batches)


def test_small_message_is_not_split() -> None:
    builder = _builder()
    message = _message(200, 300)

    batches = split(builder, message)

    assert len(batches) == 1
    assert batches[0].body == builder.render_body(message)
    assert (batches[0].start, batches[0].end) == (0, 2)


def test_default_templates_are_not_split_for_small_groups() -> None:
    target = Target(name="ops", url="https://oapi.dingtalk.com/robot/send?access_token=abc")
    builder = NotificationBuilder(Template(), target)
    message = _message(10, 10)

    assert [batch.body for batch in split(builder, message)] == [builder.render_body(message)]


def test_three_large_alerts_split_into_two_batches() -> None:
    builder = _builder()
    message = _message(7000, 7000, 7000)

    batches = split(builder, message)

    assert [(batch.start, batch.end) for batch in batches] == [(0, 2), (2, 3)]
    assert all(batch.size < MAX_MESSAGE_LENGTH for batch in batches)
    assert batches[0].body == builder.render_body(message.with_alerts(message.alerts[0:2]))
    assert batches[1].body == builder.render_body(message.with_alerts(message.alerts[2:3]))


def test_single_oversized_alert_is_sent_alone() -> None:
    builder = _builder()
    message = _message(25000)

    batches = split(builder, message)

    assert len(batches) == 1
    assert (batches[0].start, batches[0].end) == (0, 1)
    assert batches[0].size >= MAX_MESSAGE_LENGTH


def test_oversized_alert_in_the_middle_gets_its_own_batch() -> None:
    builder = _builder()
    limit = _overhead(builder) + 100

    batches = split(builder, _message(10, 200, 10), limit=limit)

    assert [(batch.start, batch.end) for batch in batches] == [(0, 1), (1, 2), (2, 3)]
    assert batches[1].size >= limit
    assert batches[2].size < limit


def test_last_batch_holds_only_the_trailing_alerts() -> None:
    builder = _builder()
    limit = _overhead(builder) + 100
    message = _message(60, 60, 60)

    batches = split(builder, message, limit=limit)

    assert [(batch.start, batch.end) for batch in batches] == [(0, 1), (1, 2), (2, 3)]
    assert batches[-1].body == builder.render_body(message.with_alerts(message.alerts[2:]))
    assert batches[-1].body != builder.render_body(message)


@pytest.mark.parametrize(
    "sizes",
    [
        (30, 80, 10, 120, 5, 5, 60),
        (99, 1, 98, 2, 50, 50, 50),
        (10,) * 25,
        (150, 150, 10, 10, 150),
    ],
)
def test_batches_cover_alerts_in_order_and_are_greedy(sizes) -> None:
    builder = _builder()
    limit = _overhead(builder) + 100
    message = _message(*sizes)

    batches = split(builder, message, limit=limit)

    _assert_covers(batches, len(sizes))
    for batch in batches:
        if batch.end - batch.start > 1:
            assert batch.size < limit
    for batch in batches[:-1]:
        if batch.size >= limit:
            continue
        extended = builder.render_body(message.with_alerts(message.alerts[batch.start : batch.end + 1]))
        assert len(extended) >= limit


def test_split_is_deterministic_and_leaves_message_untouched() -> None:
    builder = _builder()
    limit = _overhead(builder) + 100
    message = _message(40, 40, 40, 40, 40)
    original = message.alerts

    first = split(builder, message, limit=limit)
    second = split(builder, message, limit=limit)

    assert first == second
    assert message.alerts == original


def test_render_failure_aborts_split() -> None:
    text = "{% for alert in Alerts %}{{ alert.Annotations.payload }}{% if alert.Labels.index == '2' %}{{ boom }}{% endif %}{% endfor %}"
    builder = _builder(text)

    with pytest.raises(TemplateError):
        split(builder, _message(10, 10, 10), limit=_overhead(builder) + 15)
