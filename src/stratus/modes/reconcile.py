import argparse
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table
from tenacity import retry, stop_after_attempt

from ..adapters.ec2 import Ec2InstanceClient
from ..core import RECONCILE_RETRY_CONFIG
from ..logger import logger
from ..schemas.cluster import (
    ClusterProviderStatus,
    Machine,
    MachineProviderConfig,
    MachineProviderStatus,
)
from ..schemas.instance import Instance
from ..services.instances import InstanceService


class MachineDocument(BaseModel):
    machine: Machine = Field(default_factory=Machine)
    provider_config: MachineProviderConfig
    cluster_status: ClusterProviderStatus
    status: MachineProviderStatus = Field(default_factory=MachineProviderStatus)


def load_document(path: str) -> MachineDocument:
    return MachineDocument.model_validate_json(Path(path).read_text())


def write_document(path: str, doc: MachineDocument) -> None:
    """Replaces the document atomically so a recorded instance id is never lost."""
    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w") as fh:
            fh.write(doc.model_dump_json(indent=2, exclude_none=True))
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def render_instance(instance: Instance, console: Console) -> None:
    table = Table(title=f"Instance {instance.id or '(not created)'}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("State", instance.state.value)
    table.add_row("Type", instance.type)
    table.add_row("Image", instance.image_id)
    table.add_row("Subnet", instance.subnet_id)
    table.add_row("Private IP", instance.private_ip or "-")
    table.add_row("Public IP", instance.public_ip or "-")
    table.add_row("Security Groups", ", ".join(instance.security_group_ids) or "-")
    table.add_row(
        "Tags", ", ".join(f"{k}={v}" for k, v in sorted(instance.tags.items())) or "-"
    )

    console.print(table)


def run_reconcile(
    args: argparse.Namespace, log_console: Console, out_console: Console
) -> None:
    """
    Reconciles the machine described in a JSON document, re-invoking
    reconcile on transient provider failures.
    """
    doc = load_document(args.file)
    service = InstanceService(Ec2InstanceClient(doc.cluster_status.region))

    retry_config = dict(RECONCILE_RETRY_CONFIG)
    if args.retries is not None:
        retry_config["stop"] = stop_after_attempt(max(1, args.retries))

    @retry(**retry_config)  # type: ignore[call-overload, untyped-decorator]
    def _reconcile_once() -> Instance:
        return service.reconcile(
            doc.status, doc.machine, doc.provider_config, doc.cluster_status
        )

    log_console.print(
        f"Reconciling machine [bold]{doc.machine.name or args.file}[/bold] "
        f"in {doc.cluster_status.region}..."
    )
    instance = _reconcile_once()

    if args.write_status:
        doc.status = doc.status.record(instance)
        write_document(args.file, doc)
        logger.info(f"Recorded instance {instance.id} in {args.file}")

    if args.json:
        out_console.print_json(instance.model_dump_json(exclude={"user_data"}))
    else:
        render_instance(instance, out_console)
