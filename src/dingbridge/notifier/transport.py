from __future__ import annotations

import logging

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from ..config import DEFAULT_TIMEOUT
from ..models import DingTalkNotification, DingTalkResponse
from ..utils import redact_url
from .builder import encode_notification

LOGGER = logging.getLogger(__name__)


class TransportError(Exception):
    """A single delivery attempt failed: network error, non-200 status or unreadable reply."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DingTalkTransport:
    """Posts serialized notifications to a DingTalk robot endpoint. One attempt per call, no retries."""

    def __init__(self, session: requests.Session | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self.timeout = timeout

    def deliver(self, body: bytes, url: str) -> DingTalkResponse:
        try:
            response = self._session.post(
                url,
                data=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise TransportError(f"error sending notification to DingTalk: {exc}") from exc

        try:
            if response.status_code != 200:
                LOGGER.debug("DingTalk %s responded with %s", redact_url(url), response.status_code)
                raise TransportError(
                    f"unacceptable response code {response.status_code}",
                    status_code=response.status_code,
                )
            try:
                return DingTalkResponse.model_validate(response.json())
            except (ValueError, ValidationError) as exc:
                raise TransportError(
                    f"error decoding response from DingTalk: {exc}",
                    status_code=response.status_code,
                ) from exc
        finally:
            response.close()

    def send(self, notification: DingTalkNotification, url: str) -> DingTalkResponse:
        return self.deliver(encode_notification(notification), url)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
