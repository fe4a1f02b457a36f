"""Check that the review agent's environment file is complete and unchanged.

Commands::

    # Load the settings and print the effective review configuration.
    python -m scripts.check_env show --env-file .env

    # Validate and store a checksum baseline for later drift detection.
    python -m scripts.check_env record --env-file .env --hash-file .env.sha256

    # Validate and compare with the baseline (suitable for cron/systemd).
    python -m scripts.check_env verify --env-file .env --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from app.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _checksum(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _load_settings(env_file: Path) -> tuple[AppSettings, list[str]]:
    """Instantiate ``AppSettings`` from ``env_file`` and the process environment."""
    applied = _load_env_file(str(env_file))
    return AppSettings(_env_file=str(env_file)), applied  # type: ignore[call-arg]


def _redact(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return f"{secret[:2]}...{secret[-2:]}"


def _show(settings: AppSettings, applied: list[str]) -> int:
    review = settings.review
    lines = [
        f"variables read from file: {', '.join(sorted(applied)) or 'none'}",
        f"environment: {settings.environment}",
        f"log level: {settings.log_level}",
        f"gemini api key: {_redact(settings.gemini.api_key)}",
        f"gemini model: {settings.gemini.model_name}",
        f"gemini vision model: {settings.gemini.vision_model_name}",
        f"gemini timeout: {settings.gemini.request_timeout_seconds}s",
        f"session ttl: {review.session_ttl_seconds}s",
        f"max document size: {review.max_document_bytes} bytes",
        f"allowed mime types: {', '.join(review.allowed_mime_types)}",
    ]
    print("\n".join(lines))
    return EXIT_OK


def _record(env_file: Path, hash_file: Path) -> int:
    digest = _checksum(env_file)
    hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({digest})")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Checksum baseline {hash_file} is missing; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _checksum(env_file)
    if expected != actual:
        print(
            "Environment checksum mismatch!\n"
            f"  expected: {expected}\n"
            f"  actual:   {actual}",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print("Environment checksum OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate review agent settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text, needs_hash in (
        ("check", "Validate settings only.", False),
        ("show", "Validate settings and print the effective configuration.", False),
        ("record", "Validate settings and store the checksum baseline.", True),
        ("verify", "Validate settings and compare against the baseline.", True),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=Path(".env"),
            type=Path,
            help="Path to the environment file (default: ./.env).",
        )
        if needs_hash:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Location of the checksum baseline.",
            )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings, applied = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "show": lambda: _show(settings, applied),
        "record": lambda: _record(env_file, args.hash_file),
        "verify": lambda: _verify(env_file, args.hash_file),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
