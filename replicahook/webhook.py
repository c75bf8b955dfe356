from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.logger import logger
from fastapi.responses import PlainTextResponse, Response
from starlette.requests import ClientDisconnect

from replicahook import codec, responses
from replicahook.defaulting import Policy, replicas
from replicahook.errors import AdmissionError, BodyReadError, EncodeError, RejectedKind
from replicahook.types import AdmissionRequest, GroupVersionResource


DEPLOYMENTS = GroupVersionResource(group="apps", version="v1", resource="deployments")


def validate_resource(admission_request: AdmissionRequest):
    if admission_request.resource != DEPLOYMENTS:
        raise RejectedKind(admission_request.resource)


def review(body: bytes, policy: Policy = replicas) -> bytes:
    """
    Turn a serialized AdmissionReview into the serialized answer.

    Every step either succeeds or raises an ``AdmissionError``; nothing is
    retried and no later step runs after a failure.
    """
    admission_review = codec.decode_review(body)
    admission_request = admission_review.request
    validate_resource(admission_request)

    deployment = codec.decode_deployment(admission_request.object)
    operations = policy(deployment)
    if not operations:
        raise EncodeError("mutation policy produced an empty patch")
    patch_bytes = codec.encode_patch(operations)

    out = codec.encode_review(responses.patch(admission_review, patch_bytes))

    name = deployment.metadata.name if deployment.metadata else None
    logger.info("mutation complete: deployment=%s uid=%s", name, admission_request.uid)
    return out


async def mutate(request: Request):
    logger.info("received new mutate request")
    try:
        body = await request.body()
    except ClientDisconnect as err:
        raise BodyReadError("error reading request body: client disconnected") from err
    return Response(
        content=review(body, request.app.state.policy),
        media_type="application/json",
    )


def health():
    return PlainTextResponse("OK")


def admission_error(request: Request, exc: AdmissionError):
    logger.error("unable to complete request: kind=%s error=%s", exc.kind, exc)
    return PlainTextResponse(str(exc), status_code=HTTPStatus.BAD_REQUEST)


def create_app(policy: Policy = replicas) -> FastAPI:
    app = FastAPI()
    app.state.policy = policy
    app.add_exception_handler(AdmissionError, admission_error)
    app.add_api_route("/mutate", mutate, methods=["POST"])
    app.add_api_route("/healthz", health, methods=["GET"])
    return app
