"""
DingTalk notification pipeline.

Public API:
    - NotificationBuilder: Renders a webhook message into a DingTalk notification for one target
    - split / Batch: Splits oversized messages into contiguous alert batches
    - sign: Adds the timestamp/sign query parameters for targets with a secret
    - DingTalkTransport: Posts serialized notifications and decodes the robot reply
    - NotificationService: Per-target orchestration of the above
"""

from __future__ import annotations

# Rendering
from .builder import MAX_MESSAGE_LENGTH, EncodingError, NotificationBuilder, encode_notification
from .splitter import Batch, split

# Delivery
from .signer import compute_signature, sign, sign_url
from .transport import DingTalkTransport, TransportError

# Main service
from .service import NotificationService, UnknownTargetError

__all__ = [
    # Rendering
    "MAX_MESSAGE_LENGTH",
    "EncodingError",
    "NotificationBuilder",
    "encode_notification",
    "Batch",
    "split",
    # Delivery
    "compute_signature",
    "sign",
    "sign_url",
    "DingTalkTransport",
    "TransportError",
    # Service
    "NotificationService",
    "UnknownTargetError",
]
