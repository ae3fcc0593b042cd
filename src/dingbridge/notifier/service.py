from __future__ import annotations

import logging

from ..config import Config, Target
from ..models import DingTalkResponse, WebhookMessage
from ..template import Template
from ..utils import redact_url
from .builder import MAX_MESSAGE_LENGTH, NotificationBuilder
from .signer import sign
from .splitter import Batch, split
from .transport import DingTalkTransport

LOGGER = logging.getLogger(__name__)


class UnknownTargetError(KeyError):
    """Raised when a notification is addressed to a target that is not configured."""


class NotificationService:
    """Delivers webhook messages to the configured DingTalk targets."""

    def __init__(
        self,
        config: Config,
        *,
        template: Template | None = None,
        transport: DingTalkTransport | None = None,
        limit: int = MAX_MESSAGE_LENGTH,
    ) -> None:
        self._config = config
        self._template = template or Template.from_files(config.templates, builtin=not config.no_builtin_template)
        self._transport = transport or DingTalkTransport(timeout=config.timeout)
        self._limit = limit
        self._builders = {
            name: NotificationBuilder(self._template, target, config.default_message)
            for name, target in config.targets.items()
        }

    @property
    def targets(self) -> list[str]:
        return list(self._builders)

    def target(self, name: str) -> Target:
        return self.builder(name).target

    def builder(self, name: str) -> NotificationBuilder:
        try:
            return self._builders[name]
        except KeyError:
            raise UnknownTargetError(name) from None

    def render(self, target_name: str, message: WebhookMessage) -> list[Batch]:
        """Render the message for a target without sending anything."""
        return split(self.builder(target_name), message, self._limit)

    def notify(self, target_name: str, message: WebhookMessage) -> list[DingTalkResponse]:
        """Send a message to one target, split into as many notifications as the size limit requires.

        Batches are sent in alert order. If one fails, the error propagates and
        the remaining batches are not sent; earlier ones are not recalled.
        """
        builder = self.builder(target_name)
        batches = split(builder, message, self._limit)
        target = builder.target

        responses: list[DingTalkResponse] = []
        for index, batch in enumerate(batches, start=1):
            response = self._transport.deliver(batch.body, sign(target))
            if response.ok:
                LOGGER.info(
                    "Notification sent | target=%s batch=%d/%d alerts=%d-%d bytes=%d",
                    target.name,
                    index,
                    len(batches),
                    batch.start,
                    batch.end,
                    batch.size,
                )
            else:
                LOGGER.warning(
                    "DingTalk rejected notification for target %s (%s): errcode=%s errmsg=%s",
                    target.name,
                    redact_url(target.url),
                    response.error_code,
                    response.error_message,
                )
            responses.append(response)
        return responses

    def close(self) -> None:
        self._transport.close()
