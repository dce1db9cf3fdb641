"""
Redfish transport capability.

RedfishAPI is the only seam between the client logic and the network. The
live implementation talks HTTP through requests; tests substitute a fake that
records calls and returns canned resources.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import requests
from requests.auth import HTTPBasicAuth
from urllib3 import disable_warnings
from urllib3.exceptions import InsecureRequestWarning

from ..config import AppConfig
from ..errors import TransportError
from .context import OperationContext

logger = logging.getLogger(__name__)

# Status codes a Redfish service uses to report success
SUCCESS_STATUS_CODES = (200, 201, 202, 204)

REDFISH_ROOT = "/redfish/v1"
SYSTEM_PATH = REDFISH_ROOT + "/Systems/{system_id}"
RESET_PATH = SYSTEM_PATH + "/Actions/ComputerSystem.Reset"
VIRTUAL_MEDIA_COLLECTION_PATH = REDFISH_ROOT + "/Managers/{manager_id}/VirtualMedia"
VIRTUAL_MEDIA_PATH = VIRTUAL_MEDIA_COLLECTION_PATH + "/{media_id}"
EJECT_MEDIA_PATH = VIRTUAL_MEDIA_PATH + "/Actions/VirtualMedia.EjectMedia"
INSERT_MEDIA_PATH = VIRTUAL_MEDIA_PATH + "/Actions/VirtualMedia.InsertMedia"


@dataclass(frozen=True)
class RedfishResponse:
    """
    Status and decoded body of one Redfish round trip.

    body is the decoded JSON document, the raw text if the body was not JSON,
    or None for empty responses.
    """
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return self.status_code in SUCCESS_STATUS_CODES

    def json(self) -> Dict[str, Any]:
        """Body as a dict ({} when the body is not a JSON object)"""
        return self.body if isinstance(self.body, dict) else {}


class RedfishAPI(ABC):
    """
    Out-of-band REST capability consumed by RedfishClient.

    Implementations return a RedfishResponse for every answered request,
    whatever its status, and raise TransportError only when no answer was
    received.
    """

    @abstractmethod
    def get_system(self, ctx: OperationContext, system_id: str) -> RedfishResponse:
        """GET a ComputerSystem resource"""
        pass

    @abstractmethod
    def set_system(self, ctx: OperationContext, system_id: str, body: Dict[str, Any]) -> RedfishResponse:
        """PATCH a ComputerSystem resource"""
        pass

    @abstractmethod
    def reset_system(self, ctx: OperationContext, system_id: str, reset_type: str) -> RedfishResponse:
        """POST ComputerSystem.Reset with the given ResetType"""
        pass

    @abstractmethod
    def list_manager_virtual_media(self, ctx: OperationContext, manager_id: str) -> RedfishResponse:
        """GET the VirtualMedia collection of a manager"""
        pass

    @abstractmethod
    def get_manager_virtual_media(self, ctx: OperationContext, manager_id: str, media_id: str) -> RedfishResponse:
        """GET one VirtualMedia resource"""
        pass

    @abstractmethod
    def eject_virtual_media(self, ctx: OperationContext, manager_id: str, media_id: str) -> RedfishResponse:
        """POST VirtualMedia.EjectMedia"""
        pass

    @abstractmethod
    def insert_virtual_media(self, ctx: OperationContext, manager_id: str, media_id: str,
                             body: Dict[str, Any]) -> RedfishResponse:
        """POST VirtualMedia.InsertMedia"""
        pass

    @abstractmethod
    def post(self, ctx: OperationContext, path: str, body: Dict[str, Any]) -> RedfishResponse:
        """POST an arbitrary (usually OEM) action below the service root"""
        pass

    def close(self) -> None:
        """Release transport resources"""


class RequestsRedfishAPI(RedfishAPI):
    """RedfishAPI over a requests.Session with HTTP basic authentication"""

    def __init__(self,
                 base_url: str,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 insecure: bool = False,
                 use_proxy: bool = False,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            base_url: scheme://host[:port] of the BMC
            username: BMC username (no auth header when both username and password are empty)
            password: BMC password
            insecure: Skip TLS certificate verification
            use_proxy: Honour HTTP(S)_PROXY from the environment
            timeout: Per-request timeout in seconds (defaults to AppConfig.API_TIMEOUT)
            session: Pre-built session, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else AppConfig.API_TIMEOUT

        self._session = session or requests.Session()
        self._session.verify = not insecure
        self._session.trust_env = use_proxy
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if username or password:
            self._session.auth = HTTPBasicAuth(username or "", password or "")

        if insecure:
            disable_warnings(InsecureRequestWarning)

    def get_system(self, ctx, system_id):
        return self._request(ctx, "GET", SYSTEM_PATH.format(system_id=system_id))

    def set_system(self, ctx, system_id, body):
        return self._request(ctx, "PATCH", SYSTEM_PATH.format(system_id=system_id), body)

    def reset_system(self, ctx, system_id, reset_type):
        return self._request(ctx, "POST", RESET_PATH.format(system_id=system_id), {"ResetType": reset_type})

    def list_manager_virtual_media(self, ctx, manager_id):
        return self._request(ctx, "GET", VIRTUAL_MEDIA_COLLECTION_PATH.format(manager_id=manager_id))

    def get_manager_virtual_media(self, ctx, manager_id, media_id):
        return self._request(ctx, "GET", VIRTUAL_MEDIA_PATH.format(manager_id=manager_id, media_id=media_id))

    def eject_virtual_media(self, ctx, manager_id, media_id):
        return self._request(ctx, "POST", EJECT_MEDIA_PATH.format(manager_id=manager_id, media_id=media_id), {})

    def insert_virtual_media(self, ctx, manager_id, media_id, body):
        return self._request(ctx, "POST", INSERT_MEDIA_PATH.format(manager_id=manager_id, media_id=media_id), body)

    def post(self, ctx, path, body):
        return self._request(ctx, "POST", path, body)

    def close(self) -> None:
        self._session.close()

    def _request(self, ctx: OperationContext, method: str, path: str,
                 body: Optional[Dict[str, Any]] = None) -> RedfishResponse:
        """
        Perform one HTTP round trip.

        Raises:
            OperationCancelledError: If ctx is already cancelled
            TransportError: If no HTTP response was received
        """
        ctx.check()

        url = f"{self.base_url}{path}"
        timeout = self.timeout
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)

        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(method, url, json=body, timeout=timeout)
        except requests.exceptions.RequestException as e:
            logger.debug(f"{method} {url} failed: {type(e).__name__}: {e}")
            raise TransportError(f"{method} {url}: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return RedfishResponse(status_code=response.status_code, body=self._decode(response))

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
