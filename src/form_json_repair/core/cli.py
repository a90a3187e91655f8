"""
Command line entry point.

Repairs one JSON field read from a file or stdin, or serves the HTTP
validation endpoints with ``--serve``.
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from form_json_repair.core.common.exceptions import ConfigurationError
from form_json_repair.core.common.logging_utils import (
    configure_logging_with_environment_tagging,
)
from form_json_repair.core.config.app_config import AppConfig, LogLevel, load_config
from form_json_repair.core.domain.repair_models import RepairFailure, RepairOutcome
from form_json_repair.core.services.diagnostic_composer import (
    SUPPORTED_LANGUAGES,
    compose_diagnostic,
)
from form_json_repair.core.services.form_payload_service import FormPayloadService
from form_json_repair.core.services.repair_pipeline import repair

EXIT_OK = 0
EXIT_UNREPAIRABLE = 1
EXIT_USAGE = 2


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="form-json-repair",
        description="Repair operator-typed JSON and print it, or explain why it cannot be repaired",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="File holding the field text; '-' or omitted reads stdin",
    )
    parser.add_argument(
        "--label",
        default="JSON",
        help="Field label used in the diagnostic message",
    )
    parser.add_argument(
        "--lang",
        dest="language",
        choices=SUPPORTED_LANGUAGES,
        default=None,
        help="Diagnostic language (defaults to the configured language)",
    )
    parser.add_argument("--config", dest="config_file", default=None)
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[level.value for level in LogLevel],
        default=None,
    )
    parser.add_argument(
        "--show-attempts",
        action="store_true",
        help="List every repair attempt on stderr",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP validation endpoints instead of repairing a file",
    )
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    return parser


def parse_cli_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_cli_parser().parse_args(argv)


def apply_cli_args(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of ``cfg`` with command line overrides applied."""
    updates: dict = {}
    if args.host is not None:
        updates["host"] = args.host
    if args.port is not None:
        updates["port"] = args.port
    if args.log_level is not None:
        updates["logging"] = cfg.logging.model_copy(
            update={"level": LogLevel(args.log_level)}
        )
    if args.language is not None:
        updates["repair"] = cfg.repair.model_copy(update={"language": args.language})
    return cfg.model_copy(update=updates)


def _configure_logging(cfg: AppConfig) -> None:
    configure_logging_with_environment_tagging(
        level=getattr(logging, cfg.logging.level.value),
        log_file=cfg.logging.log_file,
    )


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _write_attempts(outcome: RepairOutcome) -> None:
    for attempt in outcome.attempts:
        error = attempt.result.error
        if error is None:
            status = "ok"
        else:
            status = f"{error.message} ({error.location() or 'no location'})"
        sys.stderr.write(f"[{attempt.label}] {status}\n")


def _serve(cfg: AppConfig) -> int:
    import uvicorn

    from form_json_repair.core.app.application_factory import build_app

    uvicorn.run(build_app(cfg), host=cfg.host, port=cfg.port, log_config=None)
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_cli_args(argv)

    try:
        cfg = apply_cli_args(load_config(args.config_file), args)
    except ConfigurationError as e:
        sys.stderr.write(f"Configuration error: {e.message}\n")
        return EXIT_USAGE

    _configure_logging(cfg)

    if args.serve:
        return _serve(cfg)

    try:
        text = _read_input(args.file)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"Cannot read {args.file}: {e}\n")
        return EXIT_USAGE

    language = cfg.repair.language
    size_message = FormPayloadService(cfg.repair).check_size(
        args.label, text, language
    )
    if size_message is not None:
        sys.stderr.write(size_message + "\n")
        return EXIT_USAGE

    outcome = repair(args.label, text)
    if args.show_attempts:
        _write_attempts(outcome)

    if isinstance(outcome, RepairFailure):
        sys.stderr.write(compose_diagnostic(outcome, language) + "\n")
        return EXIT_UNREPAIRABLE

    sys.stdout.write(outcome.text)
    if not outcome.text.endswith("\n"):
        sys.stdout.write("\n")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
