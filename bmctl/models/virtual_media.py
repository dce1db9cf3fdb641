"""
Virtual media slot data model.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Media types a remote boot image can be mounted as
BOOTABLE_MEDIA_TYPES = ("CD", "DVD")


@dataclass(frozen=True)
class VirtualMediaSlot:
    """
    Removable media device exposed by a BMC manager.

    Attributes:
        media_id: Resource ID of the slot (last segment of its @odata.id)
        name: Display name reported by the BMC
        inserted: True if an image is currently mounted
        image: URL of the mounted image, if any
        media_types: Media types the slot can emulate
    """
    media_id: str
    name: Optional[str] = None
    inserted: bool = False
    image: Optional[str] = None
    media_types: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_resource(cls, media_id: str, resource: dict) -> "VirtualMediaSlot":
        """Build a slot from a Redfish VirtualMedia resource"""
        return cls(
            media_id=media_id,
            name=resource.get("Name"),
            inserted=bool(resource.get("Inserted")),
            image=resource.get("Image"),
            media_types=tuple(resource.get("MediaTypes") or ()),
        )

    def bootable_media_type(self) -> Optional[str]:
        """Return the first CD/DVD media type this slot supports, if any"""
        for media_type in self.media_types:
            if media_type in BOOTABLE_MEDIA_TYPES:
                return media_type
        return None
