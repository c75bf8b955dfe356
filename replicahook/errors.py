from replicahook.types import GroupVersionResource


class AdmissionError(Exception):
    """Terminal failure while handling a single admission request."""

    kind = "AdmissionError"


class BodyReadError(AdmissionError):
    kind = "IOError"


class DecodeError(AdmissionError):
    kind = "DecodeError"


class RejectedKind(AdmissionError):
    kind = "RejectedKind"

    def __init__(self, resource: GroupVersionResource):
        self.resource = resource
        super().__init__(f"admission request is not of kind: Deployment (got {resource})")


class EncodeError(AdmissionError):
    kind = "EncodeError"


class ConfigurationError(Exception):
    pass
