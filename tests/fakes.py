"""
In-memory Redfish backend used in place of the HTTP transport.
"""

from bmctl.clients import RemoteClient
from bmctl.models import PowerState
from bmctl.redfish import RedfishAPI, RedfishResponse

# Power state a reset type leaves the system in
RESET_EFFECTS = {"On": "On", "ForceOff": "Off"}


class FakeRedfishAPI(RedfishAPI):
    """
    Stateful fake of one BMC with one system and one manager.

    Every call is appended to `calls` as a tuple, e.g. ("get_media", "Cd").
    """

    def __init__(self,
                 system_id="Embedded.1",
                 manager_id="iDRAC.Embedded.1",
                 power_state="On",
                 media=None,
                 boot_sources=("Pxe", "Cd", "Hdd"),
                 reset_effects=None):
        self.system_id = system_id
        self.manager_id = manager_id
        self.power_state = power_state
        # raw states returned by successive get_system calls before falling back to power_state
        self.power_state_sequence = []
        self.media = dict(media or {})
        self.boot_sources = list(boot_sources)
        self.reset_effects = RESET_EFFECTS if reset_effects is None else reset_effects
        self.stuck_media = set()
        self.failures = {}
        self.errors = {}
        self.post_response = RedfishResponse(202)
        self.boot_override = None
        self.calls = []
        self.closed = False

    # test helpers

    def fail(self, method, status_code=500, body=None):
        """Make `method` answer with an error status"""
        self.failures[method] = RedfishResponse(status_code, body)

    def raise_on(self, method, error):
        """Make `method` raise instead of answering"""
        self.errors[method] = error

    def call_names(self):
        return [c[0] for c in self.calls]

    def mutating_calls(self):
        return [c for c in self.calls if c[0] in ("eject", "insert", "set_system", "reset", "post")]

    def _answer(self, method, *call):
        self.calls.append((method,) + call)
        if method in self.errors:
            raise self.errors[method]
        return self.failures.get(method)

    # RedfishAPI

    def get_system(self, ctx, system_id):
        ctx.check()
        failed = self._answer("get_system")
        if failed:
            return failed
        if self.power_state_sequence:
            raw = self.power_state_sequence.pop(0)
        else:
            raw = self.power_state
        return RedfishResponse(200, {
            "Id": system_id,
            "PowerState": raw,
            "Boot": {
                "BootSourceOverrideTarget": "None",
                "BootSourceOverrideTarget@Redfish.AllowableValues": list(self.boot_sources),
            },
            "Links": {
                "ManagedBy": [{"@odata.id": f"/redfish/v1/Managers/{self.manager_id}"}],
            },
        })

    def set_system(self, ctx, system_id, body):
        ctx.check()
        failed = self._answer("set_system", body)
        if failed:
            return failed
        self.boot_override = body["Boot"]
        return RedfishResponse(204)

    def reset_system(self, ctx, system_id, reset_type):
        ctx.check()
        failed = self._answer("reset", reset_type)
        if failed:
            return failed
        if reset_type in self.reset_effects:
            self.power_state = self.reset_effects[reset_type]
        return RedfishResponse(204)

    def list_manager_virtual_media(self, ctx, manager_id):
        ctx.check()
        failed = self._answer("list_media")
        if failed:
            return failed
        members = [
            {"@odata.id": f"/redfish/v1/Managers/{manager_id}/VirtualMedia/{media_id}"}
            for media_id in self.media
        ]
        return RedfishResponse(200, {"Members": members, "Members@odata.count": len(members)})

    def get_manager_virtual_media(self, ctx, manager_id, media_id):
        ctx.check()
        failed = self._answer("get_media", media_id)
        if failed:
            return failed
        slot = self.media[media_id]
        return RedfishResponse(200, {
            "Id": media_id,
            "Name": f"Virtual {media_id}",
            "Inserted": slot.get("Inserted", False),
            "Image": slot.get("Image"),
            "MediaTypes": list(slot.get("MediaTypes", [])),
        })

    def eject_virtual_media(self, ctx, manager_id, media_id):
        ctx.check()
        failed = self._answer("eject", media_id)
        if failed:
            return failed
        if media_id not in self.stuck_media:
            self.media[media_id]["Inserted"] = False
            self.media[media_id]["Image"] = None
        return RedfishResponse(204)

    def insert_virtual_media(self, ctx, manager_id, media_id, body):
        ctx.check()
        failed = self._answer("insert", media_id, body)
        if failed:
            return failed
        self.media[media_id]["Inserted"] = True
        self.media[media_id]["Image"] = body["Image"]
        return RedfishResponse(204)

    def post(self, ctx, path, body):
        ctx.check()
        failed = self._answer("post", path, body)
        if failed:
            return failed
        return self.post_response

    def close(self):
        self.closed = True


def cd_slot(inserted=False, image=None):
    return {"Inserted": inserted, "Image": image, "MediaTypes": ["CD", "DVD"]}


def usb_slot(inserted=False, image=None):
    return {"Inserted": inserted, "Image": image, "MediaTypes": ["USBStick"]}


class RecordingBackoff:
    """Backoff that never waits and records the requested delays"""

    def __init__(self):
        self.delays = []

    def __call__(self, ctx, delay):
        ctx.check()
        self.delays.append(delay)


class FakeRemoteClient(RemoteClient):
    """
    RemoteClient with scripted outcomes, used by batch runner tests.

    `errors` maps an operation method name to the exception it raises.
    """

    def __init__(self, name, power_state=PowerState.ON, errors=None, on_call=None):
        self.name = name
        self.state = power_state
        self.errors = dict(errors or {})
        self.on_call = on_call
        self.calls = []
        self.closed = False

    @property
    def system_id(self):
        return self.name

    def _call(self, method, ctx, *args):
        self.calls.append((method,) + args)
        if self.on_call:
            self.on_call(self, method, ctx)
        if ctx is not None:
            ctx.check()
        if method in self.errors:
            raise self.errors[method]

    def power_status(self, ctx=None):
        self._call("power_status", ctx)
        return self.state

    def power_on(self, ctx=None):
        self._call("power_on", ctx)
        self.state = PowerState.ON

    def power_off(self, ctx=None):
        self._call("power_off", ctx)
        self.state = PowerState.OFF

    def eject_virtual_media(self, ctx=None):
        self._call("eject_virtual_media", ctx)

    def set_virtual_media(self, iso_url, ctx=None):
        self._call("set_virtual_media", ctx, iso_url)

    def set_boot_source_by_type(self, ctx=None):
        self._call("set_boot_source_by_type", ctx)

    def close(self):
        self.closed = True
