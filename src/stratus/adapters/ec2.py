import base64
from collections.abc import Mapping, Sequence
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..clients import get_ec2_client
from ..exceptions import InstanceNotFoundError, ProtocolViolation, ProviderError
from ..logger import logger
from ..schemas.instance import Instance
from .translate import from_sdk_instance, map_to_tags, to_run_instances_request

NOT_FOUND_CODES = ("InvalidInstanceID.NotFound", "InvalidInstanceId.NotFound")


def _parse_aws_error(error: Exception, operation: str) -> ProviderError:
    """
    Maps a botocore failure onto our error taxonomy.
    Only the instance-not-found codes become InstanceNotFoundError.
    """
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "")
        message = error.response.get("Error", {}).get("Message", str(error))
        if code in NOT_FOUND_CODES:
            return InstanceNotFoundError(
                f"{operation} - Instance not found: {message}",
                operation=operation,
                code=code,
            )
        return ProviderError(
            f"{operation} - AWS error [{code}]: {message}",
            operation=operation,
            code=code,
        )
    return ProviderError(f"{operation} - {error}", operation=operation)


class Ec2InstanceClient:
    """CloudInstanceClient backed by boto3's EC2 client."""

    def __init__(self, region: str, client: Any = None) -> None:
        self.region = region
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_ec2_client(self.region)
        return self._client

    def is_not_found(self, error: Exception) -> bool:
        return isinstance(error, InstanceNotFoundError)

    def describe_instance(self, instance_id: str) -> Instance:
        try:
            out = self.client.describe_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "DescribeInstances") from e

        for reservation in out.get("Reservations", []):
            for raw in reservation.get("Instances", []):
                return from_sdk_instance(raw)

        raise InstanceNotFoundError(
            f"DescribeInstances - no instance returned for {instance_id}",
            operation="DescribeInstances",
        )

    def run_instance(self, instance: Instance) -> Instance:
        request = to_run_instances_request(instance)

        # botocore base64-encodes UserData for RunInstances itself.
        if "UserData" in request:
            request["UserData"] = base64.b64decode(request["UserData"]).decode("utf-8")

        try:
            out = self.client.run_instances(**request)
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "RunInstances") from e

        instances = out.get("Instances") or []
        if not instances:
            raise ProtocolViolation(
                f"RunInstances - no instance returned for reservation "
                f"{out.get('ReservationId', 'unknown')}"
            )

        logger.debug(f"RunInstances returned {instances[0].get('InstanceId')}")
        return from_sdk_instance(instances[0])

    def terminate_instance(self, instance_id: str) -> None:
        try:
            self.client.terminate_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "TerminateInstances") from e

    def set_security_groups(self, instance_id: str, group_ids: Sequence[str]) -> None:
        try:
            self.client.modify_instance_attribute(
                InstanceId=instance_id, Groups=list(group_ids)
            )
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "ModifyInstanceAttribute") from e

    def create_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        try:
            self.client.create_tags(Resources=[resource_id], Tags=map_to_tags(tags))
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "CreateTags") from e

    def delete_tags(
        self, resource_id: str, tags: Mapping[str, str | None]
    ) -> None:
        try:
            self.client.delete_tags(Resources=[resource_id], Tags=map_to_tags(tags))
        except (ClientError, BotoCoreError) as e:
            raise _parse_aws_error(e, "DeleteTags") from e
