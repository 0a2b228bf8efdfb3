import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List

from loguru import logger

from stargallery.domain.media import PhotoAsset
from stargallery.photo_library.base import (
    AssetChangeRequest,
    AssetCreation,
    CompletionHandler,
    PhotoLibrary,
)

EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp"}


class LocalPhotoLibrary(PhotoLibrary):
    """Local photo library that writes assets into a folder and tracks them in a JSON file.

    Change blocks run one at a time on a dedicated worker thread.
    """

    def __init__(
        self,
        root: str | Path,
        filepath: str | Path | None = None,
        image_format: str = "JPEG",
    ) -> None:
        """Initialize LocalPhotoLibrary.

        Args:
            root: Folder asset files are written to.
            filepath: Path to the library index. If provided and exists, will auto-load.
                     If not provided, the index is kept in memory only.
            image_format: Pillow format assets are encoded with.
        """
        self._root = Path(root)
        self._filepath = str(filepath) if filepath else None
        self._format = image_format.upper()
        if self._format not in EXTENSIONS:
            raise ValueError(f"Unsupported image format: {image_format}")
        self._lock = threading.Lock()
        self._queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photo-library")

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
                self._assets = {
                    asset_id: PhotoAsset(**asset_data)
                    for asset_id, asset_data in data["assets"].items()
                }
        else:
            self._assets = {}

    def perform_changes(
        self,
        changes: Callable[[AssetChangeRequest], None],
        completion_handler: CompletionHandler,
    ) -> None:
        self._queue.submit(self._apply, changes, completion_handler)

    def get_asset(self, asset_id: str) -> PhotoAsset:
        """Get an asset by its local identifier."""
        with self._lock:
            if asset_id not in self._assets:
                raise KeyError(f"Asset {asset_id} not found")
            return self._assets[asset_id]

    def get_asset_ids(self) -> List[str]:
        """Get all asset identifiers in the library."""
        with self._lock:
            return list(self._assets.keys())

    def asset_path(self, asset_id: str) -> Path:
        return self._root / self.get_asset(asset_id).filename

    def close(self) -> None:
        """Wait for queued change blocks and stop the worker thread."""
        self._queue.shutdown(wait=True)

    def _apply(
        self,
        changes: Callable[[AssetChangeRequest], None],
        completion_handler: CompletionHandler,
    ) -> None:
        written: List[Path] = []
        try:
            request = AssetChangeRequest()
            changes(request)

            created = []
            self._root.mkdir(parents=True, exist_ok=True)
            for creation in request.creations:
                asset = self._write_asset(creation)
                written.append(self._root / asset.filename)
                created.append(asset)

            with self._lock:
                assets = {**self._assets, **{asset.id: asset for asset in created}}
                if self._filepath:
                    self._save_index(self._filepath, assets)
                self._assets = assets
        except Exception as e:
            logger.error(f"Photo library change failed: {e}")
            for path in written:
                path.unlink(missing_ok=True)
            completion_handler(False, str(e))
            return

        logger.info(f"Photo library created {len(created)} asset(s)")
        completion_handler(True, None)

    def _write_asset(self, creation: AssetCreation) -> PhotoAsset:
        image = creation.image
        filename = f"{creation.asset_id}{EXTENSIONS[self._format]}"
        if self._format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(self._root / filename, format=self._format)
        return PhotoAsset(
            id=creation.asset_id,
            filename=filename,
            original_filename=creation.original_filename,
            width=image.width,
            height=image.height,
            created=time.time(),
        )

    def _save_index(self, filepath: str, assets: Dict[str, PhotoAsset]) -> None:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        data = {"assets": {asset_id: asset.model_dump() for asset_id, asset in assets.items()}}
        with open(filepath, "w") as f:
            json.dump(data, f)
