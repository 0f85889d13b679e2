from stratus.schemas.cluster import (
    Machine,
    MachineRole,
    Network,
    Subnet,
)
from stratus.schemas.instance import Instance, InstanceState


def test_machine_role_from_label():
    assert Machine(labels={"set": "controlplane"}).role is MachineRole.CONTROL_PLANE
    assert Machine(labels={"set": "node"}).role is MachineRole.NODE
    assert Machine(labels={"set": "ControlPlane"}).role is MachineRole.UNSPECIFIED
    assert Machine().role is MachineRole.UNSPECIFIED


def test_private_subnets_keep_order():
    net = Network(
        subnets=[
            Subnet(id="subnet-a", is_public=True),
            Subnet(id="subnet-b"),
            Subnet(id="subnet-c"),
        ]
    )
    assert [sn.id for sn in net.private_subnets()] == ["subnet-b", "subnet-c"]


def test_instance_state_from_json():
    inst = Instance.model_validate(
        {
            "id": "i-1",
            "state": "shutting-down",
            "type": "t2.micro",
            "image_id": "ami-1",
            "subnet_id": "subnet-1",
        }
    )
    assert inst.state is InstanceState.SHUTTING_DOWN


def test_new_instance_has_no_id():
    inst = Instance(type="t2.micro", image_id="ami-1", subnet_id="subnet-1")
    assert inst.id is None
    assert inst.state is InstanceState.UNKNOWN
