from types import MappingProxyType

from tenacity import retry_if_exception, stop_after_attempt, wait_exponential

from .exceptions import InstanceCreationError, ProviderError


def is_retryable(error: BaseException) -> bool:
    # A failed RunInstances may have left an unrecorded instance behind.
    return isinstance(error, ProviderError) and not isinstance(
        error, InstanceCreationError
    )


# Caller-side re-invocation of reconcile, used by the CLI only.
# usage: @retry(**RECONCILE_RETRY_CONFIG)
RECONCILE_RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=1, min=4, max=10),
    "retry": retry_if_exception(is_retryable),
    "reraise": True,
}

# Ubuntu 18.04 LTS (hvm:ebs-ssd) images used when a machine names no AMI.
DEFAULT_AMIS = MappingProxyType(
    {
        "ap-northeast-1": "ami-0d7ed3ddb85b521a6",
        "ap-northeast-2": "ami-018a9a930060d38aa",
        "ap-south-1": "ami-0d773a3b7bb2bb1c1",
        "ap-southeast-1": "ami-0c5199d385b432989",
        "ap-southeast-2": "ami-07a3bd4944eb120a0",
        "ca-central-1": "ami-0427e8367e3770df1",
        "eu-central-1": "ami-0bdf93799014acdc4",
        "eu-west-1": "ami-00035f41c82244dab",
        "eu-west-2": "ami-0b0a60c0a2bd40612",
        "eu-west-3": "ami-08182c55a1c188dee",
        "sa-east-1": "ami-03c6239555bb12112",
        "us-east-1": "ami-0ac019f4fcb7cb7e6",
        "us-east-2": "ami-0f65671a86f061fcd",
        "us-west-1": "ami-063aa838bd7631e0b",
        "us-west-2": "ami-0bbe6b35405ecebdb",
    }
)

# The "set" label on a machine selects its role.
ROLE_LABEL = "set"

CONTROL_PLANE_USER_DATA = """#!/usr/bin/env bash

cat >/tmp/kubeadm.yaml <<EOF
apiVersion: kubeadm.k8s.io/v1alpha3
kind: InitConfiguration
nodeRegistration:
  criSocket: /var/run/containerd/containerd.sock
EOF

kubeadm init --config /tmp/kubeadm.yaml

# Installation from https://docs.projectcalico.org/v3.2/getting-started/kubernetes/installation/calico
kubectl --kubeconfig /etc/kubernetes/admin.conf apply -f https://docs.projectcalico.org/v3.2/getting-started/kubernetes/installation/hosted/rbac-kdd.yaml
kubectl --kubeconfig /etc/kubernetes/admin.conf apply -f https://docs.projectcalico.org/v3.2/getting-started/kubernetes/installation/hosted/kubernetes-datastore/calico-networking/1.7/calico.yaml
"""
