import argparse

from rich.console import Console

from ..adapters.ec2 import Ec2InstanceClient
from ..exceptions import ConfigurationError
from ..services.instances import InstanceService


def _parse_tag_pairs(pairs: list[str]) -> dict[str, str]:
    tags = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"tag {pair!r} is not in key=value form")
        tags[key] = value
    return tags


def _service(args: argparse.Namespace) -> InstanceService:
    return InstanceService(Ec2InstanceClient(args.region))


def run_terminate(
    args: argparse.Namespace, log_console: Console, out_console: Console
) -> None:
    _service(args).terminate(args.instance_id)
    out_console.print(f"[green]Terminating {args.instance_id}[/green]")


def run_tags(
    args: argparse.Namespace, log_console: Console, out_console: Console
) -> None:
    """Creates/updates and deletes tags on one resource."""
    to_create = _parse_tag_pairs(args.set or [])
    # Without a value DeleteTags removes the key whatever its value.
    to_delete: dict[str, str | None] = {key: None for key in args.delete or []}

    if not to_create and not to_delete:
        log_console.print("[yellow]Nothing to do.[/yellow]")
        return

    _service(args).update_resource_tags(args.instance_id, to_create, to_delete)
    out_console.print(f"[green]Updated tags on {args.instance_id}[/green]")


def run_security_groups(
    args: argparse.Namespace, log_console: Console, out_console: Console
) -> None:
    _service(args).set_security_groups(args.instance_id, args.group_ids)
    out_console.print(
        f"[green]{args.instance_id} now in {', '.join(args.group_ids)}[/green]"
    )
