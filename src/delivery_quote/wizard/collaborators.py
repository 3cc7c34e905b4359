"""
Interfaces of the collaborators the wizard hands work off to.

The wizard never creates orders, opens screens or picks images itself;
callers pass objects satisfying these protocols.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol


@dataclass(frozen=True)
class PhotoPickerOptions:
    """Fixed configuration sent to the media picker."""
    media_type: str = "images"
    allows_editing: bool = True
    aspect: tuple[int, int] = (4, 3)
    quality: float = 0.8


ITEM_PHOTO_OPTIONS = PhotoPickerOptions(quality=0.8)
STOP_PHOTO_OPTIONS = PhotoPickerOptions(quality=1.0)


class OrderCreator(Protocol):
    def create_task(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Create the order; the result carries at least an ``id``."""
        ...


class Navigator(Protocol):
    def open_tracking(self, order_id: str) -> None:
        ...

    def exit_wizard(self) -> None:
        ...


class MediaPicker(Protocol):
    async def pick_image(self, options: PhotoPickerOptions) -> Optional[str]:
        """Return a photo reference, or None when the user cancels."""
        ...
