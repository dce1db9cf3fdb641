"""
Baremetal inventory - resolves selectors into hosts ready to be managed.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config import InventoryConfig
from ..errors import AmbiguousSelectionError, ConfigurationError, HostNotFoundError
from ..models import Credentials, HostDescriptor, ManagementConfig
from ..parsers import BMCAddressParser
from ..repositories import ClientFactory
from .document_source import DocumentSource, KubernetesDocumentSource, StaticDocumentSource
from .selector import HostSelector

logger = logging.getLogger(__name__)


def _missing_field(document_name: str, path: str) -> ConfigurationError:
    return ConfigurationError(path, f"Host document '{document_name}' is missing field {path}")


def _ambiguous(selector: HostSelector, names: List[str]) -> AmbiguousSelectionError:
    return AmbiguousSelectionError(
        f"Selector '{selector}' found more than one document: {', '.join(names)}",
        names=names
    )


class BaremetalInventory:
    """
    Host inventory backed by a read-only document source.

    Every host returned by select() has a supported driver, a parsed BMC
    endpoint and resolved credentials, so clients can be built from it
    without further lookups.
    """

    def __init__(self, management_config: ManagementConfig, source: DocumentSource):
        """
        Args:
            management_config: How hosts are reached out-of-band
            source: Where host documents are read from
        """
        self.management_config = management_config
        self.source = source

    def select(self, selector: HostSelector) -> List[HostDescriptor]:
        """
        Resolve a selector into hosts.

        An empty result is not an error. Every returned host has a distinct
        qualified_name.

        Raises:
            ConfigurationError: If a matched host has an unsupported driver type,
                missing credential fields or an invalid BMC address
            AmbiguousSelectionError: If a name selector matched more than one
                document, or two matched documents share namespace and name
        """
        driver = self.management_config.type
        if not ClientFactory.is_supported(driver):
            raise ConfigurationError(
                "management type",
                f"Management driver type '{driver}' is not supported "
                f"(supported: {', '.join(ClientFactory.get_supported_drivers())})"
            )

        documents = self.source.select(selector)
        hosts = [self._to_host(document, driver) for document in documents]

        identities = [h.qualified_name for h in hosts]
        if selector.name is not None and len(hosts) > 1:
            raise _ambiguous(selector, identities)
        if len(set(identities)) != len(identities):
            duplicates = sorted({i for i in identities if identities.count(i) > 1})
            raise _ambiguous(selector, duplicates)

        logger.debug(f"Selector '{selector}' matched {len(hosts)} host(s)")
        return hosts

    def select_one(self, selector: HostSelector) -> HostDescriptor:
        """
        Resolve a selector that must match exactly one host.

        Raises:
            HostNotFoundError: If nothing matched
            AmbiguousSelectionError: If more than one host matched
        """
        hosts = self.select(selector)
        if not hosts:
            raise HostNotFoundError(f"No baremetal host found for selector '{selector}' (not found)")
        if len(hosts) > 1:
            raise _ambiguous(selector, [h.qualified_name for h in hosts])
        return hosts[0]

    def run_operation(self, ctx, operation, selector: HostSelector, options=None, reporter=None):
        """
        Run an operation across every host matched by the selector.

        See BatchRunner.run for arguments and errors.
        """
        from ..services import BatchRunner

        return BatchRunner(self, reporter=reporter).run(ctx, operation, selector, options)

    def close(self):
        self.source.close()

    def _to_host(self, document: Dict[str, Any], driver: str) -> HostDescriptor:
        metadata = document.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            raise _missing_field("<unnamed>", "metadata.name")
        namespace = metadata.get("namespace")

        bmc = (document.get("spec") or {}).get("bmc") or {}
        address = bmc.get("address")
        if not address:
            raise _missing_field(name, "spec.bmc.address")
        credentials_name = bmc.get("credentialsName")
        if not credentials_name:
            raise _missing_field(name, "spec.bmc.credentialsName")

        return HostDescriptor(
            name=name,
            namespace=namespace,
            labels=dict(metadata.get("labels") or {}),
            bmc=BMCAddressParser.parse(address),
            driver=driver,
            credentials=self._resolve_credentials(name, credentials_name, namespace),
            disable_certificate_verification=bool(bmc.get("disableCertificateVerification", False)),
        )

    def _resolve_credentials(self, host_name: str, secret_name: str,
                             namespace: Optional[str]) -> Credentials:
        data = self.source.get_secret(secret_name, namespace)
        if data is None:
            raise ConfigurationError(
                f"secret {secret_name}",
                f"Credentials secret '{secret_name}' of host '{host_name}' not found"
            )

        for field_name in ("username", "password"):
            if field_name not in data:
                raise ConfigurationError(
                    f"secret {secret_name} field {field_name}",
                    f"Credentials secret '{secret_name}' of host '{host_name}' is missing field {field_name}"
                )
        return Credentials(username=data["username"], password=data["password"])


def initialize_inventory(documents_path: Optional[str] = None,
                         management_config: Optional[ManagementConfig] = None) -> BaremetalInventory:
    """
    Initialize inventory from environment variables.

    Local YAML documents win over Kubernetes when both are configured.

    Args:
        documents_path: YAML file or directory (default: BMC_DOCUMENTS_PATH)
        management_config: Management configuration (default: from environment)

    Returns:
        Configured BaremetalInventory instance

    Raises:
        ConfigurationError: If no document source is configured
    """
    management_config = management_config or ManagementConfig.from_env()
    documents_path = documents_path or InventoryConfig.DOCUMENTS_PATH

    if documents_path:
        source = StaticDocumentSource.from_path(documents_path)
    elif InventoryConfig.is_kubernetes_configured():
        logger.info(f"Reading BareMetalHosts from {InventoryConfig.K8S_API_SERVER} "
                    f"namespace '{InventoryConfig.K8S_NAMESPACE}'")
        source = KubernetesDocumentSource(
            api_server=InventoryConfig.K8S_API_SERVER,
            token=InventoryConfig.K8S_TOKEN,
            namespace=InventoryConfig.K8S_NAMESPACE,
            verify_ssl=InventoryConfig.K8S_VERIFY_SSL
        )
    else:
        raise ConfigurationError(
            "host documents",
            "No host document source configured (set BMC_DOCUMENTS_PATH or K8S_API_SERVER/K8S_TOKEN)"
        )

    return BaremetalInventory(management_config, source)
