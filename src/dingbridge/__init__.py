"""dingbridge core package.

Relays Alertmanager webhook notifications to DingTalk robots:

- **template**: Sandboxed Jinja2 engine with Alertmanager-compatible template data
- **notifier**: Notification building, size-bounded splitting, signing and delivery
- **config**: YAML configuration of targets, templates and defaults
- **validation**: Schema and semantic checks for configuration files
- **cli**: ``dingbridge render|send|validate`` command-line entry point

The main entry point for delivery is ``NotificationService``.
"""

from .config import Config, Target, load_config
from .models import Alert, DingTalkNotification, DingTalkResponse, WebhookMessage
from .notifier import NotificationService
from .version import __version__

__all__ = [
    "__version__",
    "Alert",
    "Config",
    "DingTalkNotification",
    "DingTalkResponse",
    "NotificationService",
    "Target",
    "WebhookMessage",
    "load_config",
]
