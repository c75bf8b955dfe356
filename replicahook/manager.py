import base64
import ssl
import typing

import uvicorn
import yaml
from fastapi import FastAPI
from fastapi.logger import logger
from kubernetes.client import (
    AdmissionregistrationV1ServiceReference,
    AdmissionregistrationV1WebhookClientConfig,
    V1MutatingWebhook,
    V1MutatingWebhookConfiguration,
    V1ObjectMeta,
    V1RuleWithOperations,
)
from pydantic import BaseModel, ConfigDict

from replicahook import codec
from replicahook.defaulting import Policy, replicas
from replicahook.errors import ConfigurationError
from replicahook.webhook import DEPLOYMENTS, create_app


DEFAULT_PORT = 9093
DEFAULT_TLS_KEY = "/etc/webhook/certs/tls.key"
DEFAULT_TLS_CERT = "/etc/webhook/certs/tls.crt"

OPERATION_CREATE = "CREATE"
OPERATION_UPDATE = "UPDATE"


class TLSConfig(BaseModel):
    """Certificate and key serving the webhook. Read once at startup."""
    model_config = ConfigDict(frozen=True)

    certfile: str = DEFAULT_TLS_CERT
    keyfile: str = DEFAULT_TLS_KEY

    def verify(self):
        """Check that the pair loads; uvicorn reads the files itself."""
        try:
            ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER).load_cert_chain(self.certfile, self.keyfile)
        except OSError as err:
            raise ConfigurationError(f"unable to load certs: {err}") from err


class Manager:

    def __init__(
        self,
        tls: TLSConfig,
        port: int = DEFAULT_PORT,
        host: str = "0.0.0.0",
        app: typing.Optional[FastAPI] = None,
        policy: Policy = replicas,
    ):
        self._tls = tls
        self._port = port
        self._host = host
        self._app = app or create_app(policy)

    @property
    def app(self) -> FastAPI:
        return self._app

    @property
    def tls(self) -> TLSConfig:
        return self._tls

    @property
    def port(self) -> int:
        return self._port

    def manifest(
        self,
        service_name: str,
        namespace: str,
        ca_bundle: typing.Optional[bytes] = None,
        failure_policy: str = "Fail",
        service_port: int = 443,
    ) -> str:
        """
        Render the MutatingWebhookConfiguration that routes deployment
        writes to this server.

        :param service_name: Service fronting the webhook pods
        :param namespace: namespace of that Service
        :param ca_bundle: PEM bundle that signed the serving certificate
        :param failure_policy: ``Fail`` or ``Ignore``
        :param service_port: port exposed by the Service
        :return: YAML document
        """
        client_config = AdmissionregistrationV1WebhookClientConfig(
            service=AdmissionregistrationV1ServiceReference(
                name=service_name,
                namespace=namespace,
                path="/mutate",
                port=service_port,
            ),
        )
        if ca_bundle:
            client_config.ca_bundle = base64.b64encode(ca_bundle).decode()

        webhook = V1MutatingWebhook(
            name=f"{service_name}.{namespace}.svc",
            client_config=client_config,
            admission_review_versions=[v.split("/")[-1] for v in codec.SUPPORTED_VERSIONS],
            side_effects="None",
            failure_policy=failure_policy,
            rules=[
                V1RuleWithOperations(
                    api_groups=[DEPLOYMENTS.group],
                    api_versions=[DEPLOYMENTS.version],
                    resources=[DEPLOYMENTS.resource],
                    operations=[OPERATION_CREATE, OPERATION_UPDATE],
                ),
            ],
        )
        webhook_config = V1MutatingWebhookConfiguration(
            api_version="admissionregistration.k8s.io/v1",
            kind="MutatingWebhookConfiguration",
            metadata=V1ObjectMeta(name=service_name),
            webhooks=[webhook],
        )
        return yaml.safe_dump(codec.encode_object(webhook_config), default_flow_style=False)

    def start(self, log_level: str = "info"):
        logger.info("loading certs..")
        self._tls.verify()
        logger.info("successfully loaded certs. Starting server... port=%d", self._port)

        uvicorn.run(
            self._app,
            host=self._host,
            port=self._port,
            log_level=log_level,
            ssl_certfile=self._tls.certfile,
            ssl_keyfile=self._tls.keyfile,
        )
