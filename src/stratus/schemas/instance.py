from enum import Enum

from pydantic import BaseModel, Field


class InstanceState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "InstanceState":
        return cls.UNKNOWN


class AWSResourceReference(BaseModel):
    id: str | None = None
    arn: str | None = None


class Instance(BaseModel):
    """
    Provider-agnostic view of a compute instance.
    `id` is only set once the provider has created the resource.
    """

    id: str | None = None
    state: InstanceState = InstanceState.UNKNOWN
    type: str
    image_id: str
    subnet_id: str
    key_name: str | None = None
    iam_profile: AWSResourceReference | None = None
    security_group_ids: list[str] = Field(default_factory=list)
    security_groups: dict[str, str] = Field(
        default_factory=dict, description="Observed group id -> group name"
    )
    user_data: str | None = Field(
        default=None, description="Bootstrap payload, write-once at creation"
    )
    private_ip: str | None = None
    public_ip: str | None = None
    ena_support: bool | None = None
    ebs_optimized: bool | None = None
    tags: dict[str, str] = Field(default_factory=dict)
