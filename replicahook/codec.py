"""
JSON codec for the admission envelope and the objects it carries.

Admission reviews are decoded with an explicit decoder per supported
``apiVersion``; the embedded object is turned into a typed kubernetes client
model. Nothing here performs I/O or keeps state between calls.
"""
import inspect
import json
import typing

import jsonpatch
import pydantic
from kubernetes.client import ApiClient, V1Deployment
from kubernetes.client.exceptions import ApiException

from replicahook.errors import DecodeError, EncodeError
from replicahook.types import (
    ADMISSION_V1,
    ADMISSION_V1BETA1,
    AdmissionReview,
    AdmissionReviewV1,
    AdmissionReviewV1beta1,
    PatchOperation,
)


class _Req(object):
    def __init__(self, data):
        self.data = json.dumps(data)


def _deserialize(obj, type_: str):
    client = ApiClient()
    # newer clients take the response text and its content type
    if "content_type" in inspect.signature(client.deserialize).parameters:
        return client.deserialize(json.dumps(obj), type_, "application/json")
    return client.deserialize(_Req(obj), type_)


def _serialize(obj):
    return ApiClient().sanitize_for_serialization(obj)


def _decode_v1(data: dict) -> AdmissionReviewV1:
    return AdmissionReviewV1.model_validate(data)


def _decode_v1beta1(data: dict) -> AdmissionReviewV1beta1:
    return AdmissionReviewV1beta1.model_validate(data)


_DECODERS: typing.Dict[str, typing.Callable[[dict], AdmissionReview]] = {
    ADMISSION_V1: _decode_v1,
    ADMISSION_V1BETA1: _decode_v1beta1,
}

SUPPORTED_VERSIONS = tuple(_DECODERS)


def decode_review(body: bytes) -> AdmissionReview:
    try:
        data = json.loads(body)
    except ValueError as err:
        raise DecodeError(f"unable to deserialize request: {err}") from err

    if not isinstance(data, dict):
        raise DecodeError("unable to deserialize request: expected a JSON object")
    if data.get("kind") != "AdmissionReview":
        raise DecodeError(f"unable to deserialize request: unexpected kind {data.get('kind')!r}")

    api_version = data.get("apiVersion")
    decoder = _DECODERS.get(api_version)
    if decoder is None:
        raise DecodeError(f"unsupported admission API version: {api_version!r}")

    try:
        review = decoder(data)
    except pydantic.ValidationError as err:
        raise DecodeError(f"unable to deserialize request: {err}") from err

    if review.request is None:
        raise DecodeError("admission review does not contain a request")
    return review


def decode_deployment(obj: dict) -> V1Deployment:
    try:
        return _deserialize(obj, "V1Deployment")
    except (ValueError, ApiException) as err:
        raise DecodeError(f"unable to unmarshall request to deployment: {err}") from err


def encode_object(obj) -> dict:
    """Plain dict form of a kubernetes client model, camelCase keys."""
    return _serialize(obj)


def encode_patch(operations: typing.List[PatchOperation]) -> bytes:
    try:
        p = jsonpatch.JsonPatch([op.model_dump() for op in operations])
        return p.to_string().encode()
    except (TypeError, ValueError, jsonpatch.JsonPatchException) as err:
        raise EncodeError(f"unable to marshal patch into bytes: {err}") from err


def encode_review(review: AdmissionReview) -> bytes:
    try:
        return review.model_dump_json(by_alias=True, exclude_none=True).encode()
    except ValueError as err:
        raise EncodeError(f"unable to marshal patch response into bytes: {err}") from err
