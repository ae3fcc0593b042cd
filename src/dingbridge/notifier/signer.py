"""Request signing for DingTalk robots configured with a secret ("加签")."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..config import Target

_SIGNED_PARAMS = frozenset({"timestamp", "sign"})


def current_timestamp() -> str:
    """Milliseconds since the epoch, as DingTalk expects it."""
    return str(time.time_ns() // 1_000_000)


def compute_signature(secret: str, timestamp: str) -> str:
    string_to_sign = f"{timestamp}\n{secret}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), string_to_sign, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_url(url: str, secret: str, timestamp: str | None = None) -> str:
    if not secret:
        return url
    timestamp = timestamp or current_timestamp()

    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in _SIGNED_PARAMS
    ]
    query.append(("timestamp", timestamp))
    query.append(("sign", compute_signature(secret, timestamp)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def sign(target: Target, url: str | None = None, timestamp: str | None = None) -> str:
    """Return ``url`` (default: the target's URL) with ``timestamp`` and ``sign`` set when the target has a secret."""
    return sign_url(url or target.url, target.secret, timestamp)
