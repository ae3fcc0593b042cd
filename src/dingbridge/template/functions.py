from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable, Iterable
from typing import Any

# Characters with meaning in DingTalk markdown.
_MARKDOWN_SPECIAL = frozenset("\\`*_{}[]()#+-.!")


def markdown(text: Any) -> str:
    """Backslash-escape markdown control characters so the text renders literally."""
    return "".join("\\" + char if char in _MARKDOWN_SPECIAL else char for char in str(text))


def html(text: Any) -> str:
    return html_lib.escape(str(text), quote=False)


def join(values: Iterable[Any], separator: str = "") -> str:
    return separator.join(str(value) for value in values)


def to_upper(text: Any) -> str:
    return str(text).upper()


def to_lower(text: Any) -> str:
    return str(text).lower()


def title(text: Any) -> str:
    # Only the first letter of each word changes; the rest keeps its case.
    return re.sub(r"\b(\w)", lambda match: match.group(1).upper(), str(text))


def match(text: Any, pattern: str) -> bool:
    return re.search(pattern, str(text)) is not None


def re_replace_all(text: Any, pattern: str, replacement: str) -> str:
    return re.sub(pattern, replacement, str(text))


def length(value: Any) -> int:
    return len(value)


DEFAULT_FUNCS: dict[str, Callable[..., Any]] = {
    "markdown": markdown,
    "html": html,
    "join": join,
    "toUpper": to_upper,
    "toLower": to_lower,
    "title": title,
    "match": match,
    "reReplaceAll": re_replace_all,
    "len": length,
}
