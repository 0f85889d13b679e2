import base64

import pytest

from stratus.adapters.translate import (
    from_sdk_instance,
    map_to_tags,
    tags_to_map,
    to_run_instances_request,
)
from stratus.exceptions import ProtocolViolation
from stratus.schemas.instance import AWSResourceReference, Instance, InstanceState


def test_request_omits_empty_optionals():
    request = to_run_instances_request(
        Instance(type="t2.micro", image_id="ami-123", subnet_id="subnet-9")
    )

    assert request == {
        "InstanceType": "t2.micro",
        "SubnetId": "subnet-9",
        "ImageId": "ami-123",
        "MinCount": 1,
        "MaxCount": 1,
    }


def test_request_full():
    instance = Instance(
        type="m5.large",
        image_id="ami-123",
        subnet_id="subnet-9",
        key_name="ops",
        user_data="#!/bin/bash\necho hi\n",
        security_group_ids=["sg-1", "sg-2"],
        iam_profile=AWSResourceReference(arn="arn:aws:iam::1:instance-profile/node"),
        tags={"owner": "infra"},
    )

    request = to_run_instances_request(instance)

    assert request["KeyName"] == "ops"
    assert base64.b64decode(request["UserData"]).decode() == "#!/bin/bash\necho hi\n"
    assert request["SecurityGroupIds"] == ["sg-1", "sg-2"]
    assert request["IamInstanceProfile"] == {
        "Arn": "arn:aws:iam::1:instance-profile/node"
    }
    # A single resource-tag block for the instance
    assert request["TagSpecifications"] == [
        {"ResourceType": "instance", "Tags": [{"Key": "owner", "Value": "infra"}]}
    ]


def test_from_sdk_instance_maps_observed_fields(sdk_instance):
    raw = sdk_instance(
        KeyName="ops",
        PrivateIpAddress="10.0.0.5",
        PublicIpAddress="54.1.2.3",
        EnaSupport=True,
        EbsOptimized=False,
        IamInstanceProfile={"Arn": "arn:aws:iam::1:instance-profile/cp", "Id": "AIP"},
        SecurityGroups=[{"GroupId": "sg-cp", "GroupName": "controlplane"}],
        Tags=[{"Key": "Name", "Value": "cp-0"}],
    )

    inst = from_sdk_instance(raw)

    assert inst.id == "i-0123456789"
    assert inst.state is InstanceState.RUNNING
    assert inst.type == "t2.medium"
    assert inst.private_ip == "10.0.0.5"
    assert inst.public_ip == "54.1.2.3"
    assert inst.ena_support is True
    assert inst.ebs_optimized is False
    assert inst.iam_profile.arn == "arn:aws:iam::1:instance-profile/cp"
    assert inst.security_group_ids == ["sg-cp"]
    assert inst.security_groups == {"sg-cp": "controlplane"}
    assert inst.tags == {"Name": "cp-0"}


def test_from_sdk_instance_defaults_missing_optionals(sdk_instance):
    inst = from_sdk_instance(sdk_instance(State={"Name": "pending"}))

    assert inst.state is InstanceState.PENDING
    assert inst.key_name is None
    assert inst.private_ip is None
    assert inst.iam_profile is None
    assert inst.security_group_ids == []
    assert inst.tags == {}


def test_from_sdk_instance_unknown_state(sdk_instance):
    inst = from_sdk_instance(sdk_instance(State={"Name": "hibernating"}))
    assert inst.state is InstanceState.UNKNOWN


@pytest.mark.parametrize("missing", ["InstanceId", "State", "SubnetId", "ImageId"])
def test_from_sdk_instance_missing_required_field(missing, sdk_instance):
    raw = sdk_instance()
    del raw[missing]

    with pytest.raises(ProtocolViolation):
        from_sdk_instance(raw)


def test_required_fields_survive_a_resubmit(sdk_instance):
    inst = from_sdk_instance(sdk_instance())
    request = to_run_instances_request(inst)

    assert request["InstanceType"] == inst.type
    assert request["ImageId"] == inst.image_id
    assert request["SubnetId"] == inst.subnet_id


def test_tag_conversions():
    assert tags_to_map([{"Key": "a", "Value": "1"}]) == {"a": "1"}
    # None means "delete whatever the value is"
    assert map_to_tags({"a": "1", "b": None}) == [
        {"Key": "a", "Value": "1"},
        {"Key": "b"},
    ]
