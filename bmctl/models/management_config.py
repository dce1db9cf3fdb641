"""
Management configuration model.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class ManagementConfig:
    """
    How hosts are reached out-of-band.

    Attributes:
        type: Driver type used to build clients (e.g. 'redfish', 'redfish-dell')
        insecure: Skip TLS certificate verification
        use_proxy: Honour proxy settings from the environment
        system_action_retries: Extra polls allowed after the first one
        system_reboot_delay: Seconds to wait between polls
    """
    type: str = "redfish"
    insecure: bool = False
    use_proxy: bool = False
    system_action_retries: int = 30
    system_reboot_delay: int = 30

    def __post_init__(self):
        if not self.type:
            raise ConfigurationError("management type")
        if self.system_action_retries < 0:
            raise ConfigurationError(
                "system action retries",
                f"System action retries must be >= 0, got {self.system_action_retries}"
            )
        if self.system_reboot_delay < 0:
            raise ConfigurationError(
                "system reboot delay",
                f"System reboot delay must be >= 0, got {self.system_reboot_delay}"
            )

    @classmethod
    def from_env(cls) -> "ManagementConfig":
        """Create a configuration from the environment (see config.ManagementDefaults)"""
        from ..config import ManagementDefaults

        return cls(
            type=ManagementDefaults.TYPE,
            insecure=ManagementDefaults.INSECURE,
            use_proxy=ManagementDefaults.USE_PROXY,
            system_action_retries=ManagementDefaults.SYSTEM_ACTION_RETRIES,
            system_reboot_delay=ManagementDefaults.SYSTEM_REBOOT_DELAY,
        )

    def with_overrides(self,
                       type: Optional[str] = None,
                       insecure: Optional[bool] = None,
                       use_proxy: Optional[bool] = None,
                       system_action_retries: Optional[int] = None,
                       system_reboot_delay: Optional[int] = None) -> "ManagementConfig":
        """Create a new instance with the given values replaced (immutable update)"""
        changes = {
            "type": type,
            "insecure": insecure,
            "use_proxy": use_proxy,
            "system_action_retries": system_action_retries,
            "system_reboot_delay": system_reboot_delay,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
