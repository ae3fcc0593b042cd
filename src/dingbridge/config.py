from __future__ import annotations

import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .utils import load_yaml_file, parse_duration, validate_url

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class MessageTemplates:
    title: str | None = None
    text: str | None = None


@dataclass(frozen=True)
class Mention:
    all: bool = False
    mobiles: tuple[str, ...] = ()


@dataclass(frozen=True)
class Target:
    name: str
    url: str
    secret: str = ""
    mention: Mention | None = None
    message: MessageTemplates | None = None


@dataclass
class Config:
    targets: dict[str, Target] = field(default_factory=dict)
    templates: list[Path] = field(default_factory=list)
    no_builtin_template: bool = False
    default_message: MessageTemplates | None = None
    timeout: float = DEFAULT_TIMEOUT


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _template_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _build_message_templates(data: Any, *, field_name: str) -> MessageTemplates | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"'{field_name}' must be a mapping with 'title' and/or 'text'")
    templates = MessageTemplates(title=_template_str(data.get("title")), text=_template_str(data.get("text")))
    if templates.title is None and templates.text is None:
        return None
    return templates


def _build_mention(data: Any, *, field_name: str) -> Mention | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"'{field_name}' must be a mapping")

    raw_mobiles = data.get("mobiles") or []
    if isinstance(raw_mobiles, str):
        raw_mobiles = [raw_mobiles]
    if not isinstance(raw_mobiles, list):
        raise ValueError(f"'{field_name}.mobiles' must be a list of phone numbers")

    mobiles: list[str] = []
    for raw in raw_mobiles:
        mobile = _clean_str(raw)
        if mobile and mobile not in mobiles:
            mobiles.append(mobile)
    return Mention(all=bool(data.get("all", False)), mobiles=tuple(mobiles))


def _build_target(name: str, data: Any) -> Target:
    if not isinstance(data, dict):
        raise ValueError(f"Target '{name}' must be a mapping")

    url = _clean_str(data.get("url"))
    if not validate_url(url):
        raise ValueError(f"Target '{name}' has an invalid or missing 'url'")

    return Target(
        name=name,
        url=url,
        secret=_clean_str(data.get("secret")) or "",
        mention=_build_mention(data.get("mention"), field_name=f"targets.{name}.mention"),
        message=_build_message_templates(data.get("message"), field_name=f"targets.{name}.message"),
    )


def _resolve_template_paths(patterns: Any, base_dir: Path) -> list[Path]:
    if patterns is None:
        return []
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, list):
        raise ValueError("'templates' must be a list of file paths or glob patterns")

    paths: list[Path] = []
    for pattern in patterns:
        candidate = Path(str(pattern)).expanduser()
        if not candidate.is_absolute():
            candidate = base_dir / candidate
        matches = sorted(Path(match) for match in glob.glob(str(candidate)))
        if not matches:
            raise ValueError(f"Template pattern '{pattern}' did not match any file")
        for match in matches:
            if match not in paths:
                paths.append(match)
    return paths


def build_config(data: dict[str, Any], *, base_dir: Path | None = None) -> Config:
    base_dir = base_dir or Path.cwd()

    targets_raw = data.get("targets") or {}
    if not isinstance(targets_raw, dict):
        raise ValueError("'targets' must be a mapping of target name -> target settings")
    if not targets_raw:
        raise ValueError("At least one target must be configured under 'targets'")

    targets = {str(name): _build_target(str(name), entry) for name, entry in targets_raw.items()}

    timeout_raw = data.get("timeout")
    try:
        timeout = parse_duration(timeout_raw) if timeout_raw is not None else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"'timeout': {exc}") from exc

    return Config(
        targets=targets,
        templates=_resolve_template_paths(data.get("templates"), base_dir),
        no_builtin_template=bool(data.get("no_builtin_template", False)),
        default_message=_build_message_templates(data.get("default_message"), field_name="default_message"),
        timeout=timeout,
    )


def load_config(path: Path) -> Config:
    data = load_yaml_file(path)
    return build_config(data, base_dir=path.parent)
