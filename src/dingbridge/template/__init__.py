"""
Template rendering for DingTalk notifications.

Public API:
    - Template: Sandboxed Jinja2 engine holding the named templates
    - TemplateError: Raised for unknown templates, syntax and execution errors
    - Data, KV, Pairs, Alerts: Alertmanager-compatible template data views
"""

from __future__ import annotations

from .data import Alerts, Data, KV, Pair, Pairs, template_context
from .default import DEFAULT_TEMPLATES, DEFAULT_TEXT, DEFAULT_TITLE
from .engine import Template, TemplateError
from .functions import DEFAULT_FUNCS

__all__ = [
    "Alerts",
    "Data",
    "KV",
    "Pair",
    "Pairs",
    "template_context",
    "DEFAULT_FUNCS",
    "DEFAULT_TEMPLATES",
    "DEFAULT_TEXT",
    "DEFAULT_TITLE",
    "Template",
    "TemplateError",
]
