import typing
from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator


ADMISSION_V1 = "admission.k8s.io/v1"
ADMISSION_V1BETA1 = "admission.k8s.io/v1beta1"

PATCH_TYPE_JSON_PATCH = "JSONPatch"


class GroupVersionKind(BaseModel):
    group: str = ""
    version: str
    kind: str


class GroupVersionResource(BaseModel):
    group: str = ""
    version: str
    resource: str

    def __str__(self):
        return f"{self.group}/{self.version}/{self.resource}"


class UserInfo(BaseModel):
    username: typing.Optional[str] = None
    uid: typing.Optional[str] = None
    groups: List[str] = []


class AdmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    kind: GroupVersionKind
    resource: GroupVersionResource
    namespace: typing.Optional[str] = None
    name: typing.Optional[str] = None
    operation: typing.Optional[str] = None
    user_info: typing.Optional[UserInfo] = Field(None, alias="userInfo")
    object: dict
    old_object: typing.Optional[dict] = Field(None, alias="oldObject")
    dry_run: typing.Optional[bool] = Field(None, alias="dryRun")


class AdmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    allowed: bool
    status: typing.Optional[dict] = None
    patch: typing.Optional[str] = None
    patch_type: typing.Optional[str] = Field(None, alias="patchType")
    warnings: typing.Optional[List[str]] = None

    @model_validator(mode="after")
    def check_patch_type(self):
        if self.patch and not self.patch_type:
            raise ValueError("missing patchType field")
        if self.patch_type and not self.patch:
            raise ValueError(f"patchType is {self.patch_type} but there is no patch")
        return self


class AdmissionReview(BaseModel):
    """
    Envelope shared by every admission API version. Concrete versions pin
    ``apiVersion`` so the model class itself tells which version was decoded.
    """
    model_config = ConfigDict(populate_by_name=True)

    kind: typing.Literal["AdmissionReview"] = "AdmissionReview"
    api_version: str = Field(..., alias="apiVersion")
    request: typing.Optional[AdmissionRequest] = None
    response: typing.Optional[AdmissionResponse] = None


class AdmissionReviewV1(AdmissionReview):
    api_version: typing.Literal["admission.k8s.io/v1"] = Field(ADMISSION_V1, alias="apiVersion")


class AdmissionReviewV1beta1(AdmissionReview):
    api_version: typing.Literal["admission.k8s.io/v1beta1"] = Field(ADMISSION_V1BETA1, alias="apiVersion")


class PatchOperation(BaseModel):
    op: str
    path: str
    value: StrictInt
