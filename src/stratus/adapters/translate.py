import base64
from collections.abc import Mapping
from typing import Any

from ..exceptions import ProtocolViolation
from ..schemas.instance import AWSResourceReference, Instance, InstanceState


def map_to_tags(tags: Mapping[str, str | None]) -> list[dict[str, str]]:
    # A None value means "any value", which only DeleteTags accepts.
    return [
        {"Key": key} if value is None else {"Key": key, "Value": value}
        for key, value in tags.items()
    ]


def tags_to_map(tags: list[dict[str, Any]]) -> dict[str, str]:
    return {t["Key"]: t.get("Value", "") for t in tags}


def group_identifiers_to_map(groups: list[dict[str, Any]]) -> dict[str, str]:
    return {g["GroupId"]: g.get("GroupName", "") for g in groups}


def to_run_instances_request(instance: Instance) -> dict[str, Any]:
    """
    Builds RunInstances parameters for exactly one instance.
    Optional collections are left out entirely when empty.
    """
    request: dict[str, Any] = {
        "InstanceType": instance.type,
        "SubnetId": instance.subnet_id,
        "ImageId": instance.image_id,
        "MinCount": 1,
        "MaxCount": 1,
    }

    if instance.key_name:
        request["KeyName"] = instance.key_name

    if instance.ebs_optimized is not None:
        request["EbsOptimized"] = instance.ebs_optimized

    if instance.user_data is not None:
        request["UserData"] = base64.b64encode(
            instance.user_data.encode("utf-8")
        ).decode("ascii")

    if instance.security_group_ids:
        request["SecurityGroupIds"] = list(instance.security_group_ids)

    if instance.iam_profile is not None and instance.iam_profile.arn:
        request["IamInstanceProfile"] = {"Arn": instance.iam_profile.arn}

    if instance.tags:
        request["TagSpecifications"] = [
            {"ResourceType": "instance", "Tags": map_to_tags(instance.tags)}
        ]

    return request


def from_sdk_instance(raw: dict[str, Any]) -> Instance:
    """
    Converts an EC2 instance description into our Instance model.
    Identifier, state, type, subnet and image are guaranteed by the API.
    """
    try:
        instance_id = raw["InstanceId"]
        state_name = raw["State"]["Name"]
        instance_type = raw["InstanceType"]
        subnet_id = raw["SubnetId"]
        image_id = raw["ImageId"]
    except (KeyError, TypeError) as e:
        raise ProtocolViolation(
            f"EC2 instance description is missing required field {e}"
        ) from e

    iam_profile = None
    profile = raw.get("IamInstanceProfile")
    if profile and profile.get("Arn"):
        iam_profile = AWSResourceReference(arn=profile["Arn"], id=profile.get("Id"))

    groups = raw.get("SecurityGroups") or []

    return Instance(
        id=instance_id,
        state=InstanceState(state_name),
        type=instance_type,
        subnet_id=subnet_id,
        image_id=image_id,
        key_name=raw.get("KeyName"),
        iam_profile=iam_profile,
        security_group_ids=[g["GroupId"] for g in groups],
        security_groups=group_identifiers_to_map(groups),
        private_ip=raw.get("PrivateIpAddress"),
        public_ip=raw.get("PublicIpAddress"),
        ena_support=raw.get("EnaSupport"),
        ebs_optimized=raw.get("EbsOptimized"),
        tags=tags_to_map(raw.get("Tags") or []),
    )
