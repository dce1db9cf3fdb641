"""
Client Factory - Factory Pattern implementation.
Creates BMC clients based on the management driver type.
"""

import logging
from typing import Callable, Dict, List

from ..clients import DellClient, RedfishClient, RemoteClient
from ..errors import ConfigurationError
from ..models import HostDescriptor, ManagementConfig

logger = logging.getLogger(__name__)

ClientConstructor = Callable[..., RemoteClient]


class ClientFactory:
    """
    Factory for creating BMC client instances.

    Design Pattern: Factory Pattern + Registry Pattern
    Every constructor takes the BMC address as its first argument and the
    RedfishClient keyword arguments after it.
    """

    # Client registry
    _CLIENTS: Dict[str, ClientConstructor] = {
        "redfish": RedfishClient,
        "redfish-dell": DellClient.build,
    }

    @classmethod
    def create_client(cls, driver: str, redfish_url: str, **kwargs) -> RemoteClient:
        """
        Create a client for one BMC.

        Args:
            driver: Management driver type
            redfish_url: BMC address
            **kwargs: insecure, use_proxy, username, password, system_action_retries,
                system_reboot_delay, and optionally api / backoff

        Returns:
            Client bound to the system named by redfish_url

        Raises:
            ConfigurationError: If the driver is not supported or the address is invalid
        """
        constructor = cls._CLIENTS.get(driver)

        if not constructor:
            raise ConfigurationError(
                "management type",
                f"Management driver type '{driver}' is not supported "
                f"(supported: {', '.join(cls.get_supported_drivers())})"
            )

        logger.debug(f"Creating '{driver}' client for {redfish_url}")
        return constructor(redfish_url, **kwargs)

    @classmethod
    def create_for_host(cls, host: HostDescriptor, config: ManagementConfig, **kwargs) -> RemoteClient:
        """
        Create a client for a resolved host.

        TLS verification is skipped when either the management configuration or
        the host document asks for it.

        Args:
            host: Resolved host
            config: Management configuration
            **kwargs: Extra constructor arguments (api, backoff)
        """
        return cls.create_client(
            host.driver,
            host.bmc.address,
            insecure=config.insecure or host.disable_certificate_verification,
            use_proxy=config.use_proxy,
            username=host.credentials.username,
            password=host.credentials.password,
            system_action_retries=config.system_action_retries,
            system_reboot_delay=config.system_reboot_delay,
            **kwargs
        )

    @classmethod
    def is_supported(cls, driver: str) -> bool:
        return driver in cls._CLIENTS

    @classmethod
    def get_supported_drivers(cls) -> List[str]:
        """
        Get list of supported driver types.

        Returns:
            Sorted list of driver type strings
        """
        return sorted(cls._CLIENTS.keys())

    @classmethod
    def register_client(cls, driver: str, constructor: ClientConstructor):
        """
        Register a new client constructor (for extensibility).

        Args:
            driver: Driver type
            constructor: Callable building the client
        """
        cls._CLIENTS[driver] = constructor
        logger.info(f"Registered client for driver: {driver}")
