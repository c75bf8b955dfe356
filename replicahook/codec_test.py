import json

import pytest
from kubernetes.client import V1Deployment

from replicahook import codec
from replicahook.errors import DecodeError
from replicahook.types import AdmissionReviewV1, AdmissionReviewV1beta1, PatchOperation


def test_decode_review_v1(admission_review):
    review = codec.decode_review(json.dumps(admission_review).encode())

    assert isinstance(review, AdmissionReviewV1)
    assert review.request.uid == "abc-123"
    assert review.request.resource.resource == "deployments"
    assert review.request.user_info.username == "kubernetes-admin"
    assert review.request.object["metadata"]["name"] == "nginx-deployment"


def test_decode_review_v1beta1(make_review):
    review = codec.decode_review(json.dumps(make_review(api_version="admission.k8s.io/v1beta1")).encode())
    assert isinstance(review, AdmissionReviewV1beta1)
    assert review.api_version == "admission.k8s.io/v1beta1"


def test_decode_review_ignores_unknown_fields(admission_review):
    admission_review["somethingNew"] = {"a": 1}
    admission_review["request"]["requestSubResource"] = ""
    review = codec.decode_review(json.dumps(admission_review).encode())
    assert review.request.uid == "abc-123"


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"{",
        b"[]",
        b"\xff\xfe",
        b'"AdmissionReview"',
        b'{"kind": "Deployment", "apiVersion": "admission.k8s.io/v1"}',
        b'{"kind": "AdmissionReview"}',
    ],
)
def test_decode_review_rejects_malformed(body):
    with pytest.raises(DecodeError):
        codec.decode_review(body)


def test_decode_review_requires_uid(admission_review):
    del admission_review["request"]["uid"]
    with pytest.raises(DecodeError) as err:
        codec.decode_review(json.dumps(admission_review).encode())
    assert "uid" in str(err.value)


def test_decode_deployment(deployment):
    decoded = codec.decode_deployment(deployment)

    assert isinstance(decoded, V1Deployment)
    assert decoded.metadata.name == "nginx-deployment"
    assert decoded.spec.replicas == 1
    assert decoded.spec.template.spec.containers[0].image == "nginx:1.25"


def test_decode_deployment_bad_field_type(deployment):
    deployment["spec"]["replicas"] = "three"
    with pytest.raises(DecodeError):
        codec.decode_deployment(deployment)


def test_encode_object_round_trips_shape(deployment):
    out = codec.encode_object(codec.decode_deployment(deployment))
    assert out["spec"]["selector"] == {"matchLabels": {"app": "nginx"}}
    assert out["spec"]["replicas"] == 1


def test_encode_patch():
    out = codec.encode_patch([PatchOperation(op="replace", path="/spec/replicas", value=3)])

    assert out == b'[{"op": "replace", "path": "/spec/replicas", "value": 3}]'
    assert type(json.loads(out)[0]["value"]) is int


def test_encode_review_omits_unset(admission_review):
    review = codec.decode_review(json.dumps(admission_review).encode())
    review.request.old_object = None

    out = json.loads(codec.encode_review(review))
    assert "oldObject" not in out["request"]
    assert "response" not in out
    assert out["request"]["userInfo"]["username"] == "kubernetes-admin"


class _ContentTypeClient:
    calls = []

    def deserialize(self, response_text, response_type, content_type):
        self.calls.append((json.loads(response_text), response_type, content_type))
        return V1Deployment()


class _ResponseClient:
    calls = []

    def deserialize(self, response, response_type):
        self.calls.append((json.loads(response.data), response_type))
        return V1Deployment()


def test_decode_deployment_content_type_client(monkeypatch, deployment):
    monkeypatch.setattr(codec, "ApiClient", _ContentTypeClient)
    monkeypatch.setattr(_ContentTypeClient, "calls", [])

    assert isinstance(codec.decode_deployment(deployment), V1Deployment)
    assert _ContentTypeClient.calls == [(deployment, "V1Deployment", "application/json")]


def test_decode_deployment_response_client(monkeypatch, deployment):
    monkeypatch.setattr(codec, "ApiClient", _ResponseClient)
    monkeypatch.setattr(_ResponseClient, "calls", [])

    assert isinstance(codec.decode_deployment(deployment), V1Deployment)
    assert _ResponseClient.calls == [(deployment, "V1Deployment")]


def test_decode_deployment_client_errors_propagate(monkeypatch, deployment):
    def broken(obj, type_):
        raise TypeError("deserialize() missing 1 required positional argument")

    monkeypatch.setattr(codec, "_deserialize", broken)
    with pytest.raises(TypeError):
        codec.decode_deployment(deployment)
