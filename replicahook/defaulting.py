import typing

from kubernetes.client import V1Deployment

from replicahook.types import PatchOperation


REPLICAS = 3
REPLICAS_PATH = "/spec/replicas"

Policy = typing.Callable[[V1Deployment], typing.List[PatchOperation]]


def replicas(deployment: V1Deployment) -> typing.List[PatchOperation]:
    """
    Pin the replica count of a deployment.

    The current value of ``spec.replicas`` is never consulted: a ``replace``
    with the same value leaves the object unchanged once applied.

    :param deployment: the decoded deployment under admission
    :return: a single replace operation on ``/spec/replicas``
    """
    return [PatchOperation(op="replace", path=REPLICAS_PATH, value=REPLICAS)]
