"""Jinja2-based template engine for DingTalk notification rendering."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import jinja2
from jinja2 import DictLoader, StrictUndefined
from jinja2.sandbox import ImmutableSandboxedEnvironment

from ..models import WebhookMessage
from .data import KV, Data, template_context
from .default import DEFAULT_TEMPLATES
from .functions import DEFAULT_FUNCS

LOGGER = logging.getLogger(__name__)

_EXECUTION_ERRORS = (
    jinja2.TemplateError,
    re.error,
    ArithmeticError,
    LookupError,
    RecursionError,
    TypeError,
    ValueError,
)


class TemplateError(Exception):
    """Raised when a template is missing, malformed or fails while executing."""

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(f"error executing template {name!r}: {cause}")
        self.name = name
        self.cause = cause


class _AlertEnvironment(ImmutableSandboxedEnvironment):
    """Label and annotation keys take priority over dict methods on dot access."""

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, KV) and attribute in obj:
            return obj[attribute]
        return super().getattr(obj, attribute)


class Template:
    """Named templates rendered in a sandbox against Alertmanager-style data.

    Templates can only read the data they are given and call the helper
    functions in :data:`DEFAULT_FUNCS`; any undefined name or attribute is an
    error rather than an empty string. Label and annotation lookups are the
    exception: a missing key reads as ``""``, as it does in Alertmanager.
    """

    def __init__(self, templates: Mapping[str, str] | None = None, *, builtin: bool = True) -> None:
        sources: dict[str, str] = dict(DEFAULT_TEMPLATES) if builtin else {}
        sources.update(templates or {})
        self._sources = sources
        self._env = _AlertEnvironment(
            loader=DictLoader(sources),
            undefined=StrictUndefined,
            autoescape=False,
        )
        self._env.filters.update(DEFAULT_FUNCS)
        self._env.globals.update(DEFAULT_FUNCS)
        self._inline: dict[str, jinja2.Template] = {}

    @classmethod
    def from_files(cls, paths: Iterable[Path], *, builtin: bool = True) -> Template:
        """Load one named template per file; the file name is the template name."""
        templates: dict[str, str] = {}
        for path in paths:
            if path.name in templates:
                LOGGER.warning("Template %s overrides an earlier file with the same name", path)
            templates[path.name] = path.read_text(encoding="utf-8")
            LOGGER.debug("Loaded template %s from %s", path.name, path)
        return cls(templates, builtin=builtin)

    @property
    def names(self) -> list[str]:
        return sorted(self._sources)

    def render(self, name: str, data: WebhookMessage | Data | Mapping[str, Any]) -> str:
        """Render the named template."""
        try:
            template = self._env.get_template(name)
            return template.render(template_context(data))
        except _EXECUTION_ERRORS as exc:
            raise TemplateError(name, exc) from exc

    def execute_text(
        self,
        text: str,
        data: WebhookMessage | Data | Mapping[str, Any],
        *,
        name: str = "<inline>",
    ) -> str:
        """Render a template string, which may include any of the named templates."""
        if not text:
            return ""
        try:
            template = self._inline.get(text)
            if template is None:
                template = self._env.from_string(text)
                self._inline[text] = template
            return template.render(template_context(data))
        except _EXECUTION_ERRORS as exc:
            raise TemplateError(name, exc) from exc
