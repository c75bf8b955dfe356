import base64

from replicahook.types import AdmissionResponse, AdmissionReview, PATCH_TYPE_JSON_PATCH


def patch(admission_review: AdmissionReview, patch_bytes: bytes) -> AdmissionReview:
    """
    :param admission_review: the inbound review, left untouched
    :param patch_bytes: serialized JSON Patch document
    :return: a review of the same apiVersion and kind carrying the response
    """
    response = AdmissionResponse(
        uid=admission_review.request.uid,
        allowed=True,
        patch_type=PATCH_TYPE_JSON_PATCH,
        patch=base64.b64encode(patch_bytes).decode(),
    )
    # same model class keeps the negotiated apiVersion
    return type(admission_review)(
        kind=admission_review.kind,
        api_version=admission_review.api_version,
        response=response,
    )
