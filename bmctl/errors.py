"""
Error taxonomy for baremetal remote management.

Callers branch on the exception type, never on the message:
- ConfigurationError is raised while building clients or resolving hosts,
  before anything is sent to a BMC.
- RedfishClientError means the BMC answered badly or could not be reached.
- OperationRetriesExceededError means every poll succeeded but the hardware
  never reached the requested state.
"""

from typing import Any, Dict, Optional


class BaremetalError(Exception):
    """Base class for all baremetal management errors"""


class ConfigurationError(BaremetalError):
    """Missing or malformed management configuration"""

    def __init__(self, what: str, message: Optional[str] = None):
        self.what = what
        super().__init__(message or f"Missing configuration: {what}")


class RedfishClientError(BaremetalError):
    """
    Protocol error returned by a BMC.

    Attributes:
        status_code: HTTP status of the failed request (None for transport failures)
        body: Raw response body, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return f"Redfish client error: {self.message}"
        return f"Redfish client error: {self.message} (HTTP {self.status_code}): {self.body}"


class TransportError(RedfishClientError):
    """The HTTP round trip itself failed (connection refused, TLS, timeout)"""

    def __init__(self, message: str):
        super().__init__(message)

    def __str__(self) -> str:
        return f"HTTP request failed. Redfish may be temporarily unavailable: {self.message}"


class OperationRetriesExceededError(BaremetalError):
    """Polling budget exhausted without observing the target state"""

    def __init__(self, what: str, retries: int):
        self.what = what
        self.retries = retries
        super().__init__(f"Operation '{what}' did not complete after {retries} retries")


class OperationCancelledError(BaremetalError):
    """The operation context was cancelled or its deadline passed"""


class UnsupportedOperationError(BaremetalError):
    """No client method is mapped to the requested operation"""

    def __init__(self, operation: Any):
        self.operation = operation
        super().__init__(f"Baremetal operation not supported: {operation}")


class SelectionError(BaremetalError):
    """Base class for host selection failures"""


class HostNotFoundError(SelectionError):
    """A selector that must match one host matched none"""


class AmbiguousSelectionError(SelectionError):
    """A selector that must match one host matched several"""

    def __init__(self, message: str, names=None):
        self.names = list(names or [])
        super().__init__(message)


class NoHostsMatchedError(SelectionError):
    """A batch operation resolved to an empty host set"""


class BatchOperationError(BaremetalError):
    """
    One or more hosts failed during a batch operation.

    failures maps qualified host name (namespace/name) to the original exception raised for that host.
    """

    def __init__(self, operation: Any, failures: Dict[str, BaseException], result=None):
        self.operation = operation
        self.failures = dict(failures)
        self.result = result
        details = "; ".join(f"{name}: {err}" for name, err in sorted(self.failures.items()))
        super().__init__(
            f"Operation '{operation}' failed on {len(self.failures)} host(s): {details}"
        )
