from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import load_config
from .models import WebhookMessage
from .notifier import EncodingError, NotificationService, TransportError, UnknownTargetError
from .template import TemplateError
from .utils import load_yaml_file
from .validation import validate_config_data
from .version import __version__

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def configure_logging(level: str = "INFO", *, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s\n%(message)s\n",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dingbridge",
        description="Render Alertmanager webhook payloads and deliver them to DingTalk robots.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=Path("config.yml"), help="Path to the YAML configuration")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("render", "Render the payload for a target and print the notification bodies"),
        ("send", "Render the payload and deliver it to a target"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("target", help="Target name from the configuration")
        sub.add_argument(
            "payload",
            nargs="?",
            type=Path,
            help="Alertmanager webhook JSON file (default: read stdin)",
        )

    subparsers.add_parser("validate", help="Validate the configuration file")
    return parser


def _load_message(path: Path | None) -> WebhookMessage:
    raw = path.read_text(encoding="utf-8") if path else sys.stdin.read()
    return WebhookMessage.model_validate(json.loads(raw))


def run_validate(args: argparse.Namespace, console: Console) -> int:
    try:
        data = load_yaml_file(args.config)
    except (OSError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Unable to read {args.config}: {exc}[/bold red]")
        return EXIT_CONFIG

    report = validate_config_data(data)
    if report.errors or report.warnings:
        table = Table(title=f"Validation of {args.config}")
        table.add_column("Severity")
        table.add_column("Path", style="cyan")
        table.add_column("Message")
        for issue in [*report.errors, *report.warnings]:
            style = "red" if issue.severity == "error" else "yellow"
            table.add_row(f"[{style}]{issue.severity}[/{style}]", issue.path, issue.message)
        console.print(table)

    if report.is_valid:
        console.print("[bold green]✓ Configuration passed validation.[/bold green]")
        return EXIT_OK
    return EXIT_CONFIG


def run_render(service: NotificationService, args: argparse.Namespace, console: Console) -> int:
    message = _load_message(args.payload)
    batches = service.render(args.target, message)
    for index, batch in enumerate(batches, start=1):
        console.rule(f"batch {index}/{len(batches)} | alerts {batch.start}-{batch.end} | {batch.size} bytes")
        console.print_json(batch.body.decode("utf-8"))
    return EXIT_OK


def run_send(service: NotificationService, args: argparse.Namespace, console: Console) -> int:
    message = _load_message(args.payload)
    responses = service.notify(args.target, message)
    failed = [response for response in responses if not response.ok]
    for response in responses:
        style = "green" if response.ok else "red"
        console.print(f"[{style}]errcode={response.error_code} errmsg={response.error_message}[/{style}]")
    return EXIT_FAILURE if failed else EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, verbose=args.verbose)
    console = Console()

    if args.command == "validate":
        return run_validate(args, console)

    try:
        service = NotificationService(load_config(args.config))
    except (OSError, yaml.YAMLError, ValueError) as exc:
        LOGGER.error("Failed to load configuration %s: %s", args.config, exc)
        return EXIT_CONFIG

    try:
        if args.command == "render":
            return run_render(service, args, console)
        return run_send(service, args, console)
    except UnknownTargetError:
        LOGGER.error("Unknown target '%s'; configured targets: %s", args.target, ", ".join(service.targets))
        return EXIT_CONFIG
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        LOGGER.error("Unable to read webhook payload: %s", exc)
        return EXIT_FAILURE
    except (TemplateError, EncodingError, TransportError) as exc:
        LOGGER.error("Notification to %s failed: %s", args.target, exc)
        return EXIT_FAILURE
    finally:
        service.close()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
