import uuid
from typing import Callable, List, Optional, Protocol

from PIL import Image

from stargallery.domain.media import PhotoAsset

CompletionHandler = Callable[[bool, Optional[str]], None]


class AssetCreation:
    def __init__(self, image: Image.Image, original_filename: Optional[str]) -> None:
        self.asset_id = uuid.uuid4().hex
        self.image = image
        self.original_filename = original_filename


class AssetChangeRequest:
    """Collects the assets a single change block asks the library to create."""

    def __init__(self) -> None:
        self.creations: List[AssetCreation] = []

    def create_asset(self, image: Image.Image, original_filename: Optional[str] = None) -> str:
        """Ask for a new photo asset created from a decoded image.

        Returns:
            The local identifier the asset will have once the change is applied.
        """
        creation = AssetCreation(image, original_filename)
        self.creations.append(creation)
        return creation.asset_id


class PhotoLibrary(Protocol):
    """Protocol for photo library implementations."""

    def perform_changes(
        self,
        changes: Callable[[AssetChangeRequest], None],
        completion_handler: CompletionHandler,
    ) -> None:
        """Apply a change block atomically.

        Returns immediately; ``completion_handler`` is called later, possibly
        from another thread, with a success flag and an optional error description.
        """
        ...

    def get_asset(self, asset_id: str) -> PhotoAsset:
        """Get an asset by its local identifier."""
        ...

    def get_asset_ids(self) -> List[str]:
        """Get all asset identifiers in the library."""
        ...

    def close(self) -> None:
        """Release the resources the library holds."""
        ...
