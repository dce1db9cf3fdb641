"""
Standard Redfish client.

Every state-changing call is followed by polling until the BMC reports the
requested state or the retry budget (system_action_retries + 1 polls) runs
out. Polls are separated by the injected backoff.
"""

import logging
from typing import Any, Iterator, Optional, Tuple

from ..config import ManagementDefaults
from ..errors import ConfigurationError, OperationRetriesExceededError, RedfishClientError
from ..models import PowerState, VirtualMediaSlot
from ..parsers import BMCAddressParser
from ..redfish.api import RedfishAPI, RedfishResponse, RequestsRedfishAPI
from ..redfish.backoff import Backoff, context_backoff
from ..redfish.context import OperationContext, ensure_context
from .base_client import RemoteClient

logger = logging.getLogger(__name__)

# ComputerSystem.Reset types
RESET_TYPE_ON = "On"
RESET_TYPE_FORCE_OFF = "ForceOff"

ALLOWABLE_BOOT_SOURCES = "BootSourceOverrideTarget@Redfish.AllowableValues"


def extended_info_message(body: Any) -> Optional[str]:
    """
    Pull the first human readable message out of a Redfish error body.

    Returns:
        'Message Resolution' from @Message.ExtendedInfo, the top level error
        message, or None if the body has neither
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if not isinstance(error, dict):
        return None

    for info in error.get("@Message.ExtendedInfo") or []:
        if isinstance(info, dict) and info.get("Message"):
            return " ".join(p for p in (info.get("Message"), info.get("Resolution")) if p)
    return error.get("message")


def screen_response(response: RedfishResponse, action: str) -> RedfishResponse:
    """
    Raise RedfishClientError unless the response reports success.

    Args:
        response: Response to check
        action: What was attempted, used in the error message

    Returns:
        The response, for chaining
    """
    if not response.ok:
        detail = extended_info_message(response.body)
        message = f"Unable to {action}" + (f": {detail}" if detail else "")
        raise RedfishClientError(message, status_code=response.status_code, body=response.body)
    return response


class RedfishClient(RemoteClient):
    """Redfish client bound to a single computer system"""

    def __init__(self,
                 redfish_url: str,
                 insecure: bool = False,
                 use_proxy: bool = False,
                 username: str = "",
                 password: str = "",
                 system_action_retries: Optional[int] = None,
                 system_reboot_delay: Optional[int] = None,
                 api: Optional[RedfishAPI] = None,
                 backoff: Optional[Backoff] = None):
        """
        Initialize client for the system named by redfish_url.

        Args:
            redfish_url: BMC address, e.g. redfish+https://bmc:443/redfish/v1/Systems/1
            insecure: Skip TLS certificate verification
            use_proxy: Honour proxy settings from the environment
            username: BMC username
            password: BMC password
            system_action_retries: Extra polls after the first one (default from environment)
            system_reboot_delay: Seconds between polls (default from environment)
            api: Transport to use instead of an HTTP session
            backoff: Wait strategy between polls

        Raises:
            ConfigurationError: If the URL is empty, has no host or no system ID
        """
        self.endpoint = BMCAddressParser.parse(redfish_url)
        self.redfish_url = redfish_url
        self.username = username
        self.password = password

        if system_action_retries is None:
            system_action_retries = ManagementDefaults.SYSTEM_ACTION_RETRIES
        if system_reboot_delay is None:
            system_reboot_delay = ManagementDefaults.SYSTEM_REBOOT_DELAY
        if system_action_retries < 0 or system_reboot_delay < 0:
            raise ConfigurationError(
                "system action retries",
                "System action retries and reboot delay must not be negative"
            )
        self.system_action_retries = system_action_retries
        self.system_reboot_delay = system_reboot_delay

        self.api = api or RequestsRedfishAPI(
            self.endpoint.base_url,
            username=username,
            password=password,
            insecure=insecure,
            use_proxy=use_proxy,
        )
        self.backoff = backoff or context_backoff

    @property
    def system_id(self) -> str:
        return self.endpoint.system_id

    def close(self) -> None:
        self.api.close()

    # ------------------------------------------------------------------
    # Power
    # ------------------------------------------------------------------

    def power_status(self, ctx: Optional[OperationContext] = None) -> PowerState:
        ctx = ensure_context(ctx)
        system = self.get_system(ctx)
        state = PowerState.from_raw(system.get("PowerState"))
        if state is PowerState.UNKNOWN:
            logger.debug(f"System '{self.system_id}' reported unrecognized power state {system.get('PowerState')!r}")
        return state

    def power_on(self, ctx: Optional[OperationContext] = None) -> None:
        self._reset_and_wait(ensure_context(ctx), RESET_TYPE_ON, PowerState.ON)

    def power_off(self, ctx: Optional[OperationContext] = None) -> None:
        self._reset_and_wait(ensure_context(ctx), RESET_TYPE_FORCE_OFF, PowerState.OFF)

    def wait_for_power_state(self, target: PowerState, ctx: Optional[OperationContext] = None) -> None:
        """
        Poll the system until it reports the target power state.

        Polls at most system_action_retries + 1 times and returns on the first
        match. Errors from a poll are raised immediately; only a state mismatch
        is retried.

        Raises:
            OperationRetriesExceededError: If the state never matched
            RedfishClientError: If a poll failed
        """
        ctx = ensure_context(ctx)
        logger.debug(f"Waiting for system '{self.system_id}' to reach power state '{target.value}'")

        attempts = self.system_action_retries + 1
        for attempt in range(1, attempts + 1):
            state = self.power_status(ctx)
            if state is target:
                logger.debug(f"System '{self.system_id}' reached power state '{target.value}'")
                return

            logger.debug(
                f"System '{self.system_id}' is '{state.value}', want '{target.value}' "
                f"(attempt {attempt}/{attempts})"
            )
            if attempt < attempts:
                self.backoff(ctx, self.system_reboot_delay)

        raise OperationRetriesExceededError(
            f"wait for system {self.system_id} to reach power state {target.value}",
            self.system_action_retries
        )

    def _reset_and_wait(self, ctx: OperationContext, reset_type: str, target: PowerState) -> None:
        logger.info(f"Sending '{reset_type}' reset to system '{self.system_id}'")
        response = self.api.reset_system(ctx, self.system_id, reset_type)
        screen_response(response, f"reset system {self.system_id} ({reset_type})")
        self.wait_for_power_state(target, ctx)

    # ------------------------------------------------------------------
    # Virtual media
    # ------------------------------------------------------------------

    def eject_virtual_media(self, ctx: Optional[OperationContext] = None) -> None:
        """
        Eject every inserted virtual media slot.

        Each slot gets its own retry budget. A slot that does not report ejected
        within it aborts the call; slots already ejected stay ejected.
        """
        ctx = ensure_context(ctx)
        manager_id = self.get_manager_id(ctx)

        for slot in self.iter_virtual_media(manager_id, ctx):
            if not slot.inserted:
                logger.debug(f"Virtual media '{slot.media_id}' is empty, skipping")
                continue

            logger.info(f"Ejecting virtual media '{slot.media_id}' ({slot.image}) from system '{self.system_id}'")
            response = self.api.eject_virtual_media(ctx, manager_id, slot.media_id)
            screen_response(response, f"eject virtual media {slot.media_id}")
            self._wait_for_eject(ctx, manager_id, slot.media_id)

    def set_virtual_media(self, iso_url: str, ctx: Optional[OperationContext] = None) -> None:
        """
        Insert an image into the first CD/DVD capable slot.

        An eject pass always runs first, even when nothing is inserted.
        """
        if not iso_url:
            raise ConfigurationError("isoURL")

        ctx = ensure_context(ctx)
        self.eject_virtual_media(ctx)

        manager_id, slot, _ = self.find_bootable_media(ctx)
        logger.info(f"Inserting '{iso_url}' into virtual media '{slot.media_id}' of system '{self.system_id}'")

        body = {"Image": iso_url, "Inserted": True, "WriteProtected": True}
        response = self.api.insert_virtual_media(ctx, manager_id, slot.media_id, body)
        screen_response(response, f"insert virtual media {slot.media_id}")

    def _wait_for_eject(self, ctx: OperationContext, manager_id: str, media_id: str) -> None:
        attempts = self.system_action_retries + 1
        for attempt in range(1, attempts + 1):
            if not self.get_virtual_media(manager_id, media_id, ctx).inserted:
                logger.debug(f"Virtual media '{media_id}' ejected")
                return

            logger.debug(f"Virtual media '{media_id}' still inserted (attempt {attempt}/{attempts})")
            if attempt < attempts:
                self.backoff(ctx, self.system_reboot_delay)

        raise OperationRetriesExceededError(f"eject media {media_id}", self.system_action_retries)

    # ------------------------------------------------------------------
    # Boot source
    # ------------------------------------------------------------------

    def set_boot_source_by_type(self, ctx: Optional[OperationContext] = None) -> None:
        """Set a one-time boot override to the virtual media device type"""
        ctx = ensure_context(ctx)
        _, _, media_type = self.find_bootable_media(ctx)

        system = self.get_system(ctx)
        allowable = (system.get("Boot") or {}).get(ALLOWABLE_BOOT_SOURCES) or []

        for boot_source in allowable:
            if str(boot_source).lower() == media_type.lower():
                logger.info(f"Setting one-time boot source of system '{self.system_id}' to '{boot_source}'")
                body = {
                    "Boot": {
                        "BootSourceOverrideTarget": boot_source,
                        "BootSourceOverrideEnabled": "Once",
                    }
                }
                response = self.api.set_system(ctx, self.system_id, body)
                screen_response(response, f"set boot source of system {self.system_id}")
                return

        raise RedfishClientError(
            f"Boot source '{media_type}' is not available for system {self.system_id} "
            f"(allowed: {', '.join(map(str, allowable)) or 'none'})"
        )

    # ------------------------------------------------------------------
    # Resource discovery
    # ------------------------------------------------------------------

    def get_system(self, ctx: Optional[OperationContext] = None) -> dict:
        """Fetch the ComputerSystem resource this client is bound to"""
        ctx = ensure_context(ctx)
        response = self.api.get_system(ctx, self.system_id)
        return screen_response(response, f"get system {self.system_id}").json()

    def get_manager_id(self, ctx: Optional[OperationContext] = None) -> str:
        """ID of the first manager (BMC) listed in the system's ManagedBy links"""
        system = self.get_system(ctx)
        managed_by = (system.get("Links") or {}).get("ManagedBy") or []
        for link in managed_by:
            manager_id = BMCAddressParser.get_resource_id(link.get("@odata.id"))
            if manager_id:
                return manager_id
        raise RedfishClientError(f"System {self.system_id} does not report a managing BMC")

    def iter_virtual_media(self, manager_id: str, ctx: Optional[OperationContext] = None) -> Iterator[VirtualMediaSlot]:
        """
        Yield the manager's virtual media slots in collection order.

        Slots are fetched lazily, one GET per slot as iteration reaches it.
        """
        ctx = ensure_context(ctx)
        response = self.api.list_manager_virtual_media(ctx, manager_id)
        collection = screen_response(response, f"list virtual media of manager {manager_id}").json()

        for member in collection.get("Members") or []:
            media_id = BMCAddressParser.get_resource_id(member.get("@odata.id"))
            if media_id:
                yield self.get_virtual_media(manager_id, media_id, ctx)

    def get_virtual_media(self, manager_id: str, media_id: str,
                          ctx: Optional[OperationContext] = None) -> VirtualMediaSlot:
        ctx = ensure_context(ctx)
        response = self.api.get_manager_virtual_media(ctx, manager_id, media_id)
        resource = screen_response(response, f"get virtual media {media_id}").json()
        return VirtualMediaSlot.from_resource(media_id, resource)

    def find_bootable_media(self, ctx: Optional[OperationContext] = None) -> Tuple[str, VirtualMediaSlot, str]:
        """
        Find the first virtual media slot that can emulate a CD or DVD.

        Returns:
            Tuple of (manager_id, slot, media_type)
        """
        ctx = ensure_context(ctx)
        manager_id = self.get_manager_id(ctx)
        for slot in self.iter_virtual_media(manager_id, ctx):
            media_type = slot.bootable_media_type()
            if media_type:
                return manager_id, slot, media_type
        raise RedfishClientError("Unable to find virtual media with type CD or DVD")
