"""Persistence adapters writing an image into the platform's shared storage."""

import asyncio
import shutil
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger
from PIL import Image, UnidentifiedImageError

from stargallery.domain.media import MediaValues
from stargallery.domain.save import SaveRequest, SaveResult
from stargallery.media_store.base import MediaIndex, MediaStoreError
from stargallery.photo_library.base import AssetChangeRequest, PhotoLibrary

DEFAULT_BUFFER_SIZE = 64 * 1024


class PersistenceAdapter(Protocol):
    async def prepare(self, request: SaveRequest) -> SaveRequest | SaveResult:
        """Validate a request before any permission prompt.

        Returns the request, possibly enriched, or a failed result.
        """
        ...

    async def persist(self, request: SaveRequest) -> SaveResult:
        """Write the image of a prepared request into shared storage."""
        ...

    def close(self) -> None:
        """Release the resources the adapter holds."""
        ...


class DirectRegistrationAdapter(PersistenceAdapter):
    """Registers a media record, streams the source bytes into it and finalizes it."""

    def __init__(
        self,
        media_index: MediaIndex,
        *,
        use_pending_flag: bool,
        relative_path: str,
        mime_type: str = "image/jpeg",
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """Initialize DirectRegistrationAdapter.

        Args:
            media_index: Media index new records are created in.
            use_pending_flag: Whether records are created pending and finalized after the copy.
                The target collection is only set when this is on.
            relative_path: Collection new records are created in.
            mime_type: MIME type recorded for every image.
            buffer_size: Chunk size used while copying bytes.
        """
        self.media_index = media_index
        self.use_pending_flag = use_pending_flag
        self.relative_path = relative_path
        self.mime_type = mime_type
        self.buffer_size = buffer_size

    async def prepare(self, request: SaveRequest) -> SaveRequest | SaveResult:
        return request

    async def persist(self, request: SaveRequest) -> SaveResult:
        try:
            record_id = await asyncio.to_thread(self._register, request.source_path)
        except Exception as e:
            logger.exception(f"Failed to save {request.source_path} into the media index")
            return SaveResult.save_failed(str(e))

        logger.info(f"Saved {request.source_path} as media record {record_id}")
        return SaveResult.success(record_id)

    def close(self) -> None:
        pass

    def _register(self, source_path: str) -> str:
        source = Path(source_path)
        values = MediaValues(display_name=source.name, mime_type=self.mime_type)
        if self.use_pending_flag:
            values.relative_path = self.relative_path
            values.is_pending = True

        record_id = self.media_index.insert(values)
        if record_id is None:
            raise MediaStoreError("Failed to create new media store record.")

        with self.media_index.open_output(record_id) as output, open(source, "rb") as f:
            shutil.copyfileobj(f, output, self.buffer_size)

        if self.use_pending_flag:
            self.media_index.update(record_id, MediaValues(is_pending=False))
        return record_id


class LibraryAssetAdapter(PersistenceAdapter):
    """Decodes the image and creates a photo asset from it in one library change."""

    def __init__(self, library: PhotoLibrary) -> None:
        self.library = library

    async def prepare(self, request: SaveRequest) -> SaveRequest | SaveResult:
        try:
            image = await asyncio.to_thread(_decode, request.source_path)
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Could not decode image at {request.source_path}: {e}")
            return SaveResult.invalid_path()
        return request.model_copy(update={"image": image})

    async def persist(self, request: SaveRequest) -> SaveResult:
        if request.image is None:
            return SaveResult.invalid_path()

        loop = asyncio.get_running_loop()
        done: "asyncio.Future[tuple[bool, Optional[str]]]" = loop.create_future()
        created: list[str] = []

        def changes(change_request: AssetChangeRequest) -> None:
            created.append(
                change_request.create_asset(request.image, Path(request.source_path).name)
            )

        def completion_handler(success: bool, error: Optional[str]) -> None:
            loop.call_soon_threadsafe(_finish, done, (success, error))

        self.library.perform_changes(changes, completion_handler)
        success, error = await done

        if not success:
            logger.error(f"Photo library rejected {request.source_path}: {error}")
            return SaveResult.save_failed(error)

        asset_id = created[0] if created else None
        logger.info(f"Saved {request.source_path} as photo asset {asset_id}")
        return SaveResult.success(asset_id)

    def close(self) -> None:
        self.library.close()


def _decode(path: str) -> Image.Image:
    with Image.open(path) as image:
        image.load()
        return image.copy()


def _finish(future: asyncio.Future, outcome: tuple[bool, Optional[str]]) -> None:
    if not future.done():
        future.set_result(outcome)
