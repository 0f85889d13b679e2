from enum import Enum

from pydantic import BaseModel, Field

from ..core import ROLE_LABEL
from .instance import AWSResourceReference, Instance, InstanceState


class MachineRole(str, Enum):
    CONTROL_PLANE = "controlplane"
    NODE = "node"
    UNSPECIFIED = "unspecified"

    @classmethod
    def from_labels(cls, labels: dict[str, str]) -> "MachineRole":
        value = labels.get(ROLE_LABEL, "")
        if value == cls.CONTROL_PLANE.value:
            return cls.CONTROL_PLANE
        if value == cls.NODE.value:
            return cls.NODE
        return cls.UNSPECIFIED


class SecurityGroupRole(str, Enum):
    CONTROL_PLANE = "controlplane"
    NODE = "node"


class Machine(BaseModel):
    name: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def role(self) -> MachineRole:
        return MachineRole.from_labels(self.labels)


class MachineProviderConfig(BaseModel):
    instance_type: str
    ami: AWSResourceReference = Field(default_factory=AWSResourceReference)
    subnet: AWSResourceReference | None = None
    key_name: str = ""
    iam_instance_profile: AWSResourceReference | None = None
    additional_tags: dict[str, str] = Field(default_factory=dict)


class MachineProviderStatus(BaseModel):
    instance_id: str | None = None
    instance_state: InstanceState | None = None

    def record(self, instance: Instance) -> "MachineProviderStatus":
        """Returns the status the caller should persist after a reconcile."""
        return self.model_copy(
            update={"instance_id": instance.id, "instance_state": instance.state}
        )


class Subnet(BaseModel):
    id: str
    availability_zone: str | None = None
    is_public: bool = False


class SecurityGroup(BaseModel):
    id: str
    name: str | None = None


class Network(BaseModel):
    subnets: list[Subnet] = Field(default_factory=list)
    security_groups: dict[SecurityGroupRole, SecurityGroup] = Field(
        default_factory=dict
    )

    def private_subnets(self) -> list[Subnet]:
        return [sn for sn in self.subnets if not sn.is_public]


class ClusterProviderStatus(BaseModel):
    region: str
    network: Network = Field(default_factory=Network)
