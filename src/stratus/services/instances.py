from collections.abc import Mapping, Sequence

from ..core import DEFAULT_AMIS
from ..exceptions import (
    ConfigurationError,
    InstanceCreationError,
    ProtocolViolation,
)
from ..logger import logger
from ..protocols import CloudInstanceClient
from ..schemas.cluster import (
    ClusterProviderStatus,
    Machine,
    MachineProviderConfig,
    MachineProviderStatus,
)
from ..schemas.instance import Instance
from .policy import resolve_instance
from .tags import apply_tag_actions, plan_update


class InstanceService:
    """
    Reconciles a machine against its cloud instance.

    Stateless between calls: the caller persists the instance id it gets
    back and must serialize reconcile calls per machine.
    """

    def __init__(
        self,
        client: CloudInstanceClient,
        ami_lookup: Mapping[str, str] = DEFAULT_AMIS,
    ) -> None:
        self.client = client
        self.ami_lookup = ami_lookup

    def find_existing(self, instance_id: str | None) -> Instance | None:
        """
        Returns the instance, or None if there is no id or the provider
        reports it missing. Every other failure is raised.
        """
        if not instance_id:
            return None

        try:
            instance = self.client.describe_instance(instance_id)
        except Exception as e:
            if self.client.is_not_found(e):
                logger.info(f"Instance {instance_id} not found")
                return None
            raise

        logger.debug(f"Found instance {instance_id} in state {instance.state.value}")
        return instance

    def create_if_absent(
        self,
        machine: Machine,
        config: MachineProviderConfig,
        cluster_status: ClusterProviderStatus,
    ) -> Instance:
        """Runs exactly one new instance. Callers check find_existing first."""
        instance = resolve_instance(machine, config, cluster_status, self.ami_lookup)

        logger.info(
            f"Creating {instance.type} instance for machine {machine.name or '<unnamed>'} "
            f"(role={machine.role.value}, image={instance.image_id}, "
            f"subnet={instance.subnet_id})"
        )

        try:
            created = self.client.run_instance(instance)
        except (ConfigurationError, ProtocolViolation):
            raise
        except Exception as e:
            raise InstanceCreationError(
                f"failed to run instance {instance!r}: {e}",
                instance=instance,
                code=getattr(e, "code", None),
            ) from e

        logger.info(f"Created instance {created.id}")
        return created

    def reconcile(
        self,
        status: MachineProviderStatus,
        machine: Machine,
        config: MachineProviderConfig,
        cluster_status: ClusterProviderStatus,
    ) -> Instance:
        """Returns the recorded instance if it still exists, otherwise creates one."""
        instance = self.find_existing(status.instance_id)
        if instance is not None:
            return instance

        return self.create_if_absent(machine, config, cluster_status)

    def terminate(self, instance_id: str) -> None:
        logger.info(f"Terminating instance {instance_id}")
        self.client.terminate_instance(instance_id)

    def set_security_groups(self, instance_id: str, group_ids: Sequence[str]) -> None:
        """Replaces the full security group membership of the instance."""
        logger.debug(f"Setting security groups of {instance_id} to {list(group_ids)}")
        self.client.set_security_groups(instance_id, group_ids)

    def update_resource_tags(
        self,
        resource_id: str,
        to_create: Mapping[str, str],
        to_delete: Mapping[str, str | None],
    ) -> None:
        actions = plan_update(resource_id, to_create, to_delete)
        if not actions:
            logger.debug(f"No tag changes for {resource_id}")
            return
        apply_tag_actions(self.client, actions)
