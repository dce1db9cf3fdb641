"""
Read-only sources of host documents.

Host documents are metal3 BareMetalHost resources. Their BMC credentials live
in Secret documents referenced by spec.bmc.credentialsName.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import yaml
from kubernetes import client
from kubernetes.client.rest import ApiException

from ..config import AppConfig
from ..errors import ConfigurationError
from .selector import HostSelector

logger = logging.getLogger(__name__)

BAREMETAL_HOST_KIND = "BareMetalHost"
SECRET_KIND = "Secret"

YAML_SUFFIXES = (".yaml", ".yml")


def decode_secret_data(secret: Dict[str, Any]) -> Dict[str, str]:
    """
    Merge a Secret's base64 'data' and plain 'stringData' into one dict.

    stringData wins over data for the same key, as on a real API server.

    Raises:
        ConfigurationError: If a data value is not valid base64
    """
    name = (secret.get("metadata") or {}).get("name")
    values = {}
    for key, encoded in (secret.get("data") or {}).items():
        try:
            values[key] = base64.b64decode(str(encoded), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"secret {name} field {key}",
                f"Secret '{name}' field '{key}' is not valid base64: {e}"
            ) from e
    for key, value in (secret.get("stringData") or {}).items():
        values[key] = str(value)
    return values


class DocumentSource(ABC):
    """Read-only query interface over host documents"""

    @abstractmethod
    def select(self, selector: HostSelector) -> List[Dict[str, Any]]:
        """
        Return every BareMetalHost document matched by the selector.

        Args:
            selector: Host selector

        Returns:
            Matching host documents (possibly empty)
        """
        pass

    @abstractmethod
    def get_secret(self, name: str, namespace: Optional[str] = None) -> Optional[Dict[str, str]]:
        """
        Return decoded credential data of a Secret, None if it does not exist.

        Args:
            name: Secret name
            namespace: Secret namespace (None matches any namespace)
        """
        pass

    def close(self):
        """Release resources held by the source"""


class StaticDocumentSource(DocumentSource):
    """
    Host documents loaded from YAML.

    Accepts a single file or a directory; every *.yaml / *.yml file found is
    read as a multi-document stream. Documents other than BareMetalHost and
    Secret are ignored.
    """

    def __init__(self, documents: List[Dict[str, Any]]):
        self._hosts = [d for d in documents if d.get("kind") == BAREMETAL_HOST_KIND]
        self._secrets = [d for d in documents if d.get("kind") == SECRET_KIND]
        logger.debug(f"Loaded {len(self._hosts)} host document(s) and {len(self._secrets)} secret(s)")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "StaticDocumentSource":
        """
        Load documents from a YAML file or a directory of YAML files.

        Raises:
            ConfigurationError: If the path does not exist or a file is not valid YAML
        """
        path = Path(path)
        if path.is_dir():
            files = sorted(p for p in path.rglob("*") if p.suffix in YAML_SUFFIXES and p.is_file())
        elif path.is_file():
            files = [path]
        else:
            raise ConfigurationError("documents path", f"Documents path does not exist: {path}")

        documents = []
        for file_path in files:
            documents.extend(cls._load_file(file_path))

        logger.info(f"Read {len(documents)} document(s) from {len(files)} file(s) under {path}")
        return cls(documents)

    @classmethod
    def from_yaml(cls, text: str) -> "StaticDocumentSource":
        """Load documents from a YAML string (multi-document streams allowed)"""
        return cls([d for d in yaml.safe_load_all(text) if isinstance(d, dict)])

    @staticmethod
    def _load_file(file_path: Path) -> List[Dict[str, Any]]:
        try:
            with open(file_path, "r") as f:
                return [d for d in yaml.safe_load_all(f) if isinstance(d, dict)]
        except yaml.YAMLError as e:
            raise ConfigurationError("host documents", f"Invalid YAML in {file_path}: {e}") from e

    def select(self, selector: HostSelector) -> List[Dict[str, Any]]:
        return [d for d in self._hosts if selector.matches(d)]

    def get_secret(self, name: str, namespace: Optional[str] = None) -> Optional[Dict[str, str]]:
        for secret in self._secrets:
            metadata = secret.get("metadata") or {}
            if metadata.get("name") != name:
                continue
            if namespace and metadata.get("namespace") and metadata.get("namespace") != namespace:
                continue
            return decode_secret_data(secret)
        return None


class KubernetesDocumentSource(DocumentSource):
    """
    BareMetalHost resources and their Secrets read from a Kubernetes API server.

    Only list/read calls are made; nothing is ever written back.
    """

    # BareMetalHost CRD details (Metal3)
    BMH_GROUP = "metal3.io"
    BMH_VERSION = "v1alpha1"
    BMH_PLURAL = "baremetalhosts"

    def __init__(self,
                 api_server: str,
                 token: str,
                 namespace: str = "metal3",
                 verify_ssl: bool = True,
                 api_client: Optional[client.ApiClient] = None):
        """
        Initialize Kubernetes document source.

        Args:
            api_server: Kubernetes API server URL
            token: Bearer token
            namespace: Namespace holding the BareMetalHost resources
            verify_ssl: Verify the API server certificate
            api_client: Pre-built API client, mainly for tests
        """
        self.api_server = api_server
        self.namespace = namespace

        if api_client is None:
            configuration = client.Configuration()
            configuration.host = api_server
            configuration.verify_ssl = verify_ssl
            configuration.api_key = {"authorization": f"Bearer {token}"}
            api_client = client.ApiClient(configuration)

        self._api_client = api_client
        self._custom_api = client.CustomObjectsApi(api_client)
        self._core_api = client.CoreV1Api(api_client)

    def select(self, selector: HostSelector) -> List[Dict[str, Any]]:
        kwargs = {}
        # labels are filtered server side, the name client side
        if selector.label_selector:
            kwargs["label_selector"] = selector.label_selector

        logger.debug(f"Querying BareMetalHost resources in namespace '{self.namespace}' ({selector})")
        try:
            bmh_list = self._custom_api.list_namespaced_custom_object(
                group=self.BMH_GROUP,
                version=self.BMH_VERSION,
                namespace=self.namespace,
                plural=self.BMH_PLURAL,
                _request_timeout=AppConfig.K8S_TIMEOUT,
                **kwargs
            )
        except ApiException as e:
            if e.status == 404:
                logger.warning(f"BareMetalHost CRD not found at {self.api_server} - Metal3 may not be installed")
                return []
            raise ConfigurationError(
                "host documents",
                f"Kubernetes API error listing BareMetalHosts: {e.status} - {e.reason}"
            ) from e

        items = bmh_list.get("items", [])
        logger.debug(f"Found {len(items)} BareMetalHost resource(s)")
        return [item for item in items if selector.matches(item)]

    def get_secret(self, name: str, namespace: Optional[str] = None) -> Optional[Dict[str, str]]:
        namespace = namespace or self.namespace
        try:
            secret = self._core_api.read_namespaced_secret(
                name=name,
                namespace=namespace,
                _request_timeout=AppConfig.K8S_TIMEOUT
            )
        except ApiException as e:
            if e.status == 404:
                logger.debug(f"Secret '{namespace}/{name}' not found")
                return None
            raise ConfigurationError(
                f"secret {name}",
                f"Kubernetes API error reading secret '{namespace}/{name}': {e.status} - {e.reason}"
            ) from e

        return decode_secret_data({
            "metadata": {"name": name},
            "data": secret.data or {},
            "stringData": getattr(secret, "string_data", None) or {},
        })

    def close(self):
        self._api_client.close()
