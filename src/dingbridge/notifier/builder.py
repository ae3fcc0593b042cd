from __future__ import annotations

import logging

from pydantic_core import PydanticSerializationError

from ..config import MessageTemplates, Target
from ..models import DingTalkAt, DingTalkMarkdown, DingTalkNotification, WebhookMessage
from ..template import DEFAULT_TEXT, DEFAULT_TITLE, Template

LOGGER = logging.getLogger(__name__)

# DingTalk rejects larger bodies with errcode 460101 ("message too long, exceed 20000 bytes").
MAX_MESSAGE_LENGTH = 20000


class EncodingError(ValueError):
    """Raised when a notification cannot be serialized to JSON."""


def encode_notification(notification: DingTalkNotification) -> bytes:
    try:
        return notification.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    except (PydanticSerializationError, UnicodeEncodeError) as exc:
        raise EncodingError(f"error encoding DingTalk request: {exc}") from exc


class NotificationBuilder:
    """Renders webhook messages into DingTalk markdown notifications for one target.

    The title and text templates are chosen once, field by field: the
    target's own ``message`` wins over the configured ``default_message``,
    which wins over the built-in default.
    """

    def __init__(
        self,
        template: Template,
        target: Target,
        default_message: MessageTemplates | None = None,
    ) -> None:
        self._template = template
        self.target = target
        override = target.message or MessageTemplates()
        defaults = default_message or MessageTemplates()
        self.title_template: str = override.title or defaults.title or DEFAULT_TITLE
        self.text_template: str = override.text or defaults.text or DEFAULT_TEXT

    def build(self, message: WebhookMessage) -> DingTalkNotification:
        title = self._template.execute_text(self.title_template, message, name=f"{self.target.name}.title")
        text = self._template.execute_text(self.text_template, message, name=f"{self.target.name}.text")

        at: DingTalkAt | None = None
        mention = self.target.mention
        if mention is not None:
            at = DingTalkAt(is_at_all=mention.all, at_mobiles=list(mention.mobiles))

        return DingTalkNotification(markdown=DingTalkMarkdown(title=title, text=text), at=at)

    def render_body(self, message: WebhookMessage) -> bytes:
        body = encode_notification(self.build(message))
        LOGGER.debug(
            "Rendered notification for target %s | alerts=%d bytes=%d",
            self.target.name,
            len(message.alerts),
            len(body),
        )
        return body
