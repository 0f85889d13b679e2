import argparse
import logging
from importlib.metadata import version

from pydantic import ValidationError
from rich.console import Console

from .exceptions import StratusError
from .logger import logger, setup_logger
from .modes import attributes, reconcile


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stratus: EC2 Machine Instance Reconciler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the instance for a machine, or pick up the one already recorded
  stratus reconcile machine.json --write-status

  # Replace the security groups of an instance
  stratus security-groups --region us-east-1 i-0abc sg-111 sg-222

  # Add one tag and remove another
  stratus tags --region us-east-1 i-0abc --set owner=infra --delete scratch

  # Terminate an instance
  stratus terminate --region us-east-1 i-0abc
""",
    )
    try:
        ver = version("stratus")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"Stratus v{ver}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("reconcile", help="Reconcile a machine's instance")
    rec.add_argument("file", help="JSON machine document")
    rec.add_argument(
        "--write-status",
        action="store_true",
        help="Write the recorded instance id back into the document",
    )
    rec.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Attempts on transient provider errors (default: 3)",
    )
    rec.add_argument("--json", action="store_true", help="Output instance as JSON")
    rec.set_defaults(handler=reconcile.run_reconcile)

    term = sub.add_parser("terminate", help="Terminate an instance")
    term.add_argument("--region", required=True)
    term.add_argument("instance_id")
    term.set_defaults(handler=attributes.run_terminate, json=False)

    tags = sub.add_parser("tags", help="Create/update and delete instance tags")
    tags.add_argument("--region", required=True)
    tags.add_argument("instance_id")
    tags.add_argument("--set", nargs="+", metavar="KEY=VALUE")
    tags.add_argument("--delete", nargs="+", metavar="KEY")
    tags.set_defaults(handler=attributes.run_tags, json=False)

    sgs = sub.add_parser(
        "security-groups", help="Replace the security groups of an instance"
    )
    sgs.add_argument("--region", required=True)
    sgs.add_argument("instance_id")
    sgs.add_argument("group_ids", nargs="+", metavar="SG")
    sgs.set_defaults(handler=attributes.run_security_groups, json=False)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.verbose:
        setup_logger(level=logging.DEBUG if args.verbose > 1 else logging.INFO)

    # Use stderr for logs/progress if stdout is piped for JSON
    log_console = Console(stderr=True, quiet=args.json)
    out_console = Console()

    try:
        args.handler(args, log_console, out_console)
    except (StratusError, ValidationError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
