import copy

import pytest
from fastapi.testclient import TestClient

from replicahook import webhook


DEPLOYMENT = {
    "apiVersion": "apps/v1",
    "kind": "Deployment",
    "metadata": {
        "name": "nginx-deployment",
        "namespace": "dummy",
        "labels": {"app": "nginx"},
    },
    "spec": {
        "replicas": 1,
        "selector": {"matchLabels": {"app": "nginx"}},
        "template": {
            "metadata": {"labels": {"app": "nginx"}},
            "spec": {
                "containers": [
                    {
                        "name": "nginx",
                        "image": "nginx:1.25",
                        "ports": [{"containerPort": 80, "protocol": "TCP"}],
                    }
                ]
            },
        },
    },
}


def _make_review(obj=None, uid="abc-123", api_version="admission.k8s.io/v1", resource=None):
    return {
        "kind": "AdmissionReview",
        "apiVersion": api_version,
        "request": {
            "uid": uid,
            "kind": {"group": "apps", "version": "v1", "kind": "Deployment"},
            "resource": resource or {"group": "apps", "version": "v1", "resource": "deployments"},
            "namespace": "dummy",
            "operation": "CREATE",
            "userInfo": {
                "username": "kubernetes-admin",
                "groups": ["system:masters", "system:authenticated"],
            },
            "object": copy.deepcopy(DEPLOYMENT) if obj is None else obj,
            "oldObject": None,
            "dryRun": False,
        },
    }


@pytest.fixture()
def deployment():
    return copy.deepcopy(DEPLOYMENT)


@pytest.fixture()
def make_review():
    return _make_review


@pytest.fixture()
def admission_review():
    return _make_review()


@pytest.fixture()
def app():
    return webhook.create_app()


@pytest.fixture()
def client(app):
    return TestClient(app)
