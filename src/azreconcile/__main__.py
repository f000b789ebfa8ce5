"""CLI entry point for azreconcile."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .handlers import RESOURCE_HANDLERS
from .logging import setup_logging
from .models.timeouts import parse_duration


def _duration(text: str) -> float:
    """argparse type for --timeout: seconds or a string like '30m'."""
    try:
        return parse_duration(float(text) if text.replace(".", "", 1).isdigit() else text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="azreconcile",
        description="Create, read, update and delete Azure resources from desired-state files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print keys and connection strings instead of masking them",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    types = sorted(RESOURCE_HANDLERS)

    create = subparsers.add_parser("create", help="Create a resource from a desired-state file")
    create.add_argument("file", type=Path, help="Desired-state YAML file")

    update = subparsers.add_parser("update", help="Update a resource from a desired-state file")
    update.add_argument("file", type=Path, help="Desired-state YAML file")

    for name, help_text in (
        ("read", "Print the current state of a resource"),
        ("import", "Adopt an existing resource and print its state"),
        ("delete", "Delete a resource"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("resource_type", choices=types, help="Resource type")
        sub.add_argument("resource_id", help="Full ARM resource ID")
        if name == "delete":
            sub.add_argument(
                "--timeout",
                type=_duration,
                default=None,
                help="How long to wait for the delete, e.g. 90, 10m or 1h (default: 30m)",
            )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args (everything else comes from ARM_* env vars)
    settings_kwargs: dict = {}
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)

    setup_logging(settings.verbose, settings.log_file)

    from .cli.commands import run_apply, run_delete, run_read

    if args.command in ("create", "update"):
        exit_code = run_apply(
            args.file, settings, is_new=args.command == "create", show_secrets=args.show_secrets
        )
    elif args.command == "read":
        exit_code = run_read(args.resource_type, args.resource_id, settings, args.show_secrets)
    elif args.command == "import":
        exit_code = run_read(
            args.resource_type, args.resource_id, settings, args.show_secrets, require=True
        )
    else:
        exit_code = run_delete(args.resource_type, args.resource_id, settings, args.timeout)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
