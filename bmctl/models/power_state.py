"""
Power state value object.
"""

from enum import Enum


class PowerState(Enum):
    """Power state reported by a BMC for one computer system"""
    ON = "On"
    OFF = "Off"
    POWERING_ON = "PoweringOn"
    POWERING_OFF = "PoweringOff"
    UNKNOWN = "Unknown"

    @classmethod
    def from_raw(cls, raw) -> "PowerState":
        """
        Map a raw PowerState string to the enum.

        Unrecognized or missing values map to UNKNOWN rather than raising.
        """
        for state in cls:
            if state.value == raw:
                return state
        return cls.UNKNOWN
