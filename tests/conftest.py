import pytest

from stratus.exceptions import InstanceNotFoundError
from stratus.schemas.cluster import (
    ClusterProviderStatus,
    Machine,
    MachineProviderConfig,
    Network,
    SecurityGroup,
    SecurityGroupRole,
    Subnet,
)


@pytest.fixture
def cloud_client(mocker):
    """A CloudInstanceClient double using our own NotFound error."""
    client = mocker.Mock()
    client.is_not_found.side_effect = lambda e: isinstance(e, InstanceNotFoundError)
    return client


@pytest.fixture
def cluster_status():
    return ClusterProviderStatus(
        region="us-east-1",
        network=Network(
            subnets=[
                Subnet(id="subnet-pub", is_public=True),
                Subnet(id="subnet-1", availability_zone="us-east-1a"),
            ],
            security_groups={
                SecurityGroupRole.CONTROL_PLANE: SecurityGroup(
                    id="sg-cp", name="cluster-controlplane"
                ),
                SecurityGroupRole.NODE: SecurityGroup(id="sg-node", name="cluster-node"),
            },
        ),
    )


@pytest.fixture
def controlplane_machine():
    return Machine(name="cp-0", labels={"set": "controlplane"})


@pytest.fixture
def provider_config():
    return MachineProviderConfig(instance_type="t2.medium")


@pytest.fixture
def sdk_instance():
    """Factory for a minimal DescribeInstances/RunInstances instance payload."""

    def _make(**overrides):
        raw = {
            "InstanceId": "i-0123456789",
            "State": {"Code": 16, "Name": "running"},
            "InstanceType": "t2.medium",
            "SubnetId": "subnet-1",
            "ImageId": "ami-0ac019f4fcb7cb7e6",
        }
        raw.update(overrides)
        return raw

    return _make
