from collections.abc import Mapping

from ..core import CONTROL_PLANE_USER_DATA
from ..exceptions import ConfigurationError
from ..schemas.cluster import (
    ClusterProviderStatus,
    Machine,
    MachineProviderConfig,
    MachineRole,
    SecurityGroupRole,
)
from ..schemas.instance import Instance


def _security_group_id(
    cluster_status: ClusterProviderStatus, role: SecurityGroupRole
) -> str:
    group = cluster_status.network.security_groups.get(role)
    if group is None:
        raise ConfigurationError(
            f"cluster has no {role.value} security group to attach"
        )
    return group.id


def resolve_instance(
    machine: Machine,
    config: MachineProviderConfig,
    cluster_status: ClusterProviderStatus,
    ami_lookup: Mapping[str, str],
) -> Instance:
    """
    Builds the Instance to create from the machine's config, falling back to
    cluster-level defaults. Raises ConfigurationError before any API call.
    """
    if not config.instance_type:
        raise ConfigurationError("machine provider config has no instance type")

    # 1. Image: explicit AMI, or the region default
    if config.ami.id:
        image_id = config.ami.id
    else:
        try:
            image_id = ami_lookup[cluster_status.region]
        except KeyError:
            raise ConfigurationError(
                f"no default AMI for region {cluster_status.region!r}"
            ) from None

    # 2. Subnet: explicit subnet, or the first private one
    if config.subnet is not None and config.subnet.id:
        subnet_id = config.subnet.id
    else:
        private = cluster_status.network.private_subnets()
        if not private:
            raise ConfigurationError("failed to run instance, no subnets available")
        subnet_id = private[0].id

    # 3. Role specific bootstrap data and security groups
    user_data = None
    security_group_ids = []
    role = machine.role
    if role is MachineRole.CONTROL_PLANE:
        user_data = CONTROL_PLANE_USER_DATA
        security_group_ids.append(
            _security_group_id(cluster_status, SecurityGroupRole.CONTROL_PLANE)
        )
    elif role is MachineRole.NODE:
        security_group_ids.append(
            _security_group_id(cluster_status, SecurityGroupRole.NODE)
        )

    # 4. IAM profile only when an ARN is given
    iam_profile = None
    if config.iam_instance_profile is not None and config.iam_instance_profile.arn:
        iam_profile = config.iam_instance_profile

    return Instance(
        type=config.instance_type,
        image_id=image_id,
        subnet_id=subnet_id,
        user_data=user_data,
        security_group_ids=security_group_ids,
        key_name=config.key_name or None,
        iam_profile=iam_profile,
        tags=dict(config.additional_tags),
    )
