"""
Batch Runner - runs one baremetal operation across a set of hosts.

Hosts run concurrently, one worker thread per host (bounded by
max_concurrency). Each worker owns its own client; the only shared state is
the result, written by the submitting thread as futures complete.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..clients import RemoteClient
from ..errors import (
    BatchOperationError,
    ConfigurationError,
    NoHostsMatchedError,
    OperationCancelledError,
    UnsupportedOperationError,
)
from ..inventory import BaremetalInventory, HostSelector
from ..models import HostDescriptor
from ..redfish.context import OperationContext, ensure_context
from ..repositories import ClientFactory
from .events import EventKind, EventReporter, LoggingReporter, OperationEvent

logger = logging.getLogger(__name__)


class BaremetalOperation(Enum):
    """Operations that can be run against selected hosts"""
    POWER_ON = "power-on"
    POWER_OFF = "power-off"
    REBOOT = "reboot"
    EJECT_VIRTUAL_MEDIA = "eject-virtual-media"
    REMOTE_DIRECT = "remote-direct"
    POWER_STATUS = "power-status"

    @classmethod
    def parse(cls, value: Union[str, "BaremetalOperation"]) -> "BaremetalOperation":
        """
        Convert an operation identifier to the enum.

        Raises:
            UnsupportedOperationError: If the identifier is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedOperationError(value) from None


# Operation -> client call
_OPERATIONS: Dict[BaremetalOperation, Callable[[RemoteClient, OperationContext, "BatchOptions"], Any]] = {
    BaremetalOperation.POWER_ON: lambda client, ctx, options: client.power_on(ctx),
    BaremetalOperation.POWER_OFF: lambda client, ctx, options: client.power_off(ctx),
    BaremetalOperation.REBOOT: lambda client, ctx, options: client.reboot(ctx),
    BaremetalOperation.EJECT_VIRTUAL_MEDIA: lambda client, ctx, options: client.eject_virtual_media(ctx),
    BaremetalOperation.REMOTE_DIRECT: lambda client, ctx, options: client.remote_direct(options.iso_url, ctx),
    BaremetalOperation.POWER_STATUS: lambda client, ctx, options: client.power_status(ctx),
}


@dataclass(frozen=True)
class BatchOptions:
    """
    Options for one batch run.

    Attributes:
        max_concurrency: Maximum hosts in flight (None = all hosts at once)
        iso_url: Image for remote-direct
        timeout: Deadline for the whole batch in seconds (None = no deadline)
    """
    max_concurrency: Optional[int] = None
    iso_url: Optional[str] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class HostResult:
    """Outcome of the operation on one host"""
    host: str
    succeeded: bool
    value: Any = None
    error: Optional[BaseException] = None


class BatchResult:
    """
    Per-host outcomes of a batch operation, keyed by qualified host name
    (namespace/name, or the bare name for documents without a namespace).

    The batch succeeded only if every host succeeded.
    """

    def __init__(self, operation: BaremetalOperation):
        self.operation = operation
        self._results: Dict[str, HostResult] = {}

    def add(self, result: HostResult):
        if result.host in self._results:
            raise ValueError(f"Duplicate result for host '{result.host}'")
        self._results[result.host] = result

    def get(self, host: str) -> Optional[HostResult]:
        return self._results.get(host)

    @property
    def hosts(self) -> List[str]:
        return sorted(self._results.keys())

    @property
    def results(self) -> List[HostResult]:
        """Host results sorted by qualified host name"""
        return [self._results[h] for h in self.hosts]

    @property
    def failures(self) -> Dict[str, BaseException]:
        return {r.host: r.error for r in self.results if not r.succeeded}

    @property
    def succeeded(self) -> bool:
        return all(r.succeeded for r in self._results.values())

    def __len__(self) -> int:
        return len(self._results)


class BatchRunner:
    """
    Runs operations against hosts resolved from an inventory.

    Design Pattern: Facade Pattern
    Hides selection, client construction and concurrency behind run().
    """

    def __init__(self,
                 inventory: BaremetalInventory,
                 client_builder: Optional[Callable[[HostDescriptor], RemoteClient]] = None,
                 reporter: Optional[EventReporter] = None):
        """
        Initialize batch runner.

        Args:
            inventory: Inventory resolving selectors into hosts
            client_builder: Builds the client for a host (default: ClientFactory)
            reporter: Receives per-host events (default: log them)
        """
        self.inventory = inventory
        self.client_builder = client_builder or self._default_client_builder
        self.reporter = reporter or LoggingReporter()

    def run(self,
            ctx: Optional[OperationContext],
            operation: Union[str, BaremetalOperation],
            selector: HostSelector,
            options: Optional[BatchOptions] = None) -> BatchResult:
        """
        Run an operation on every host matched by the selector.

        Args:
            ctx: Operation context; cancelling it stops in-flight hosts at their
                next request or wait
            operation: Operation to run
            selector: Which hosts to run it on
            options: Batch options

        Returns:
            BatchResult in which every host succeeded

        Raises:
            UnsupportedOperationError: If the operation is unknown
            ConfigurationError: If options are invalid (e.g. remote-direct without an ISO)
                or a host cannot be resolved
            NoHostsMatchedError: If the selector matched no host
            OperationCancelledError: If the batch was cancelled or timed out
            BatchOperationError: If any host failed (failures keyed by qualified host name)
        """
        operation = BaremetalOperation.parse(operation)
        if operation not in _OPERATIONS:
            raise UnsupportedOperationError(operation.value)

        options = options or BatchOptions()
        if operation is BaremetalOperation.REMOTE_DIRECT and not options.iso_url:
            raise ConfigurationError("isoURL")
        if options.max_concurrency is not None and options.max_concurrency < 1:
            raise ConfigurationError(
                "max concurrency",
                f"Max concurrency must be >= 1, got {options.max_concurrency}"
            )

        ctx = ensure_context(ctx).with_timeout(options.timeout)

        hosts = self.inventory.select(selector)
        if not hosts:
            raise NoHostsMatchedError(f"No baremetal hosts matched selector: {selector}")

        workers = min(options.max_concurrency or len(hosts), len(hosts))
        logger.info(f"Running '{operation.value}' on {len(hosts)} host(s) with {workers} worker(s)")

        result = BatchResult(operation)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bmctl") as pool:
            future_to_host = {
                pool.submit(self._run_host, ctx, operation, host, options): host
                for host in hosts
            }
            try:
                # Single writer: only this thread touches result
                for future in as_completed(future_to_host):
                    result.add(future.result())
            except BaseException:
                # Interrupted while waiting: stop the workers at their next check
                ctx.cancel()
                raise

        failures = result.failures
        if failures:
            batch_error = BatchOperationError(operation.value, failures, result)
            try:
                ctx.check()
            except OperationCancelledError as e:
                raise OperationCancelledError(
                    f"{e}: '{operation.value}' stopped with {len(failures)} of {len(hosts)} host(s) unfinished"
                ) from batch_error
            raise batch_error

        logger.info(f"'{operation.value}' succeeded on {len(hosts)} host(s)")
        return result

    def _run_host(self, ctx: OperationContext, operation: BaremetalOperation,
                  host: HostDescriptor, options: BatchOptions) -> HostResult:
        """Run the operation on one host; never raises, the error goes into the result"""
        self._report(host.qualified_name, operation, EventKind.STARTED)
        try:
            # queued hosts do not start once the batch is cancelled
            ctx.check()
            with self.client_builder(host) as client:
                value = _OPERATIONS[operation](client, ctx, options)
        except Exception as e:
            self._report(host.qualified_name, operation, EventKind.FAILED, message=str(e), error=e)
            return HostResult(host=host.qualified_name, succeeded=False, error=e)

        message = value.value if hasattr(value, "value") else ""
        self._report(host.qualified_name, operation, EventKind.SUCCEEDED, message=message, value=value)
        return HostResult(host=host.qualified_name, succeeded=True, value=value)

    def _report(self, host: str, operation: BaremetalOperation, kind: EventKind, **kwargs):
        event = OperationEvent(host=host, operation=operation.value, kind=kind, **kwargs)
        try:
            self.reporter.report(event)
        except Exception as e:
            logger.warning(f"Event reporter failed for host '{host}': {type(e).__name__}: {e}")

    def _default_client_builder(self, host: HostDescriptor) -> RemoteClient:
        return ClientFactory.create_for_host(host, self.inventory.management_config)
