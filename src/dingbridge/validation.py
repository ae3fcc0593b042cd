from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from jsonschema import Draft7Validator

from .utils import parse_duration, validate_url


@dataclass(slots=True)
class ValidationIssue:
    """Represents a single validation problem."""

    severity: str
    path: str
    message: str
    code: str


@dataclass(slots=True)
class ValidationReport:
    """Aggregates validation warnings and errors."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


_MESSAGE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "text": {"type": "string"},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "timeout": {"type": ["string", "number"]},
        "no_builtin_template": {"type": "boolean"},
        "templates": {
            "oneOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "string"},
            ]
        },
        "default_message": _MESSAGE_SCHEMA,
        "targets": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "url": {"type": "string"},
                    "secret": {"type": "string"},
                    "mention": {
                        "type": "object",
                        "properties": {
                            "all": {"type": "boolean"},
                            "mobiles": {
                                "type": "array",
                                "items": {"type": ["string", "integer"]},
                            },
                        },
                        "additionalProperties": False,
                    },
                    "message": _MESSAGE_SCHEMA,
                },
                "required": ["url"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["targets"],
    "additionalProperties": True,
}


def _format_jsonschema_path(path: Sequence[Any]) -> str:
    if not path:
        return "<root>"
    tokens: List[str] = []
    for part in path:
        if isinstance(part, int):
            if tokens:
                tokens[-1] = f"{tokens[-1]}[{part}]"
            else:
                tokens.append(f"[{part}]")
        else:
            tokens.append(str(part))
    return ".".join(tokens) if tokens else "<root>"


def validate_config_data(data: Dict[str, Any]) -> ValidationReport:
    """Validate configuration data against the schema and semantic rules.

    Args:
        data: The configuration data to validate

    Returns:
        ValidationReport containing any errors or warnings found
    """
    report = ValidationReport()
    validator = Draft7Validator(CONFIG_SCHEMA)

    for error in sorted(validator.iter_errors(data), key=lambda exc: list(exc.absolute_path)):
        report.errors.append(
            ValidationIssue(
                severity="error",
                path=_format_jsonschema_path(error.absolute_path),
                message=error.message,
                code="schema",
            )
        )

    _validate_semantics(data, report)
    return report


def _validate_semantics(data: Dict[str, Any], report: ValidationReport) -> None:
    timeout = data.get("timeout")
    if timeout is not None:
        try:
            parse_duration(timeout)
        except ValueError as exc:
            report.errors.append(ValidationIssue("error", "timeout", str(exc), "timeout"))

    targets = data.get("targets")
    if not isinstance(targets, dict):
        return

    for name, target in targets.items():
        if not isinstance(target, dict):
            continue
        path = f"targets.{name}"
        url = target.get("url")
        if isinstance(url, str) and not validate_url(url.strip()):
            report.errors.append(
                ValidationIssue("error", f"{path}.url", "Target URL must be an http(s) URL", "target-url")
            )
        mention: Optional[Dict[str, Any]] = target.get("mention")
        if isinstance(mention, dict) and not mention.get("all") and not mention.get("mobiles"):
            report.warnings.append(
                ValidationIssue(
                    "warning",
                    f"{path}.mention",
                    "Mention block neither mentions everyone nor lists any mobiles",
                    "empty-mention",
                )
            )
        if target.get("secret") == "":
            report.warnings.append(
                ValidationIssue("warning", f"{path}.secret", "Secret is empty; requests will not be signed", "empty-secret")
            )

    if data.get("no_builtin_template") and not data.get("templates"):
        report.warnings.append(
            ValidationIssue(
                "warning",
                "no_builtin_template",
                "Built-in templates are disabled and no template files are configured",
                "no-templates",
            )
        )
