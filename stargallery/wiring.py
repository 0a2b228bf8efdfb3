"""Builds the save-image operation for the platform the service runs on."""

from loguru import logger

from stargallery.config import Settings
from stargallery.media_store.local import LocalMediaIndex
from stargallery.permissions.base import PermissionService
from stargallery.photo_library.local import LocalPhotoLibrary
from stargallery.platforms.capabilities import PlatformCapabilities
from stargallery.saver.adapters import (
    DirectRegistrationAdapter,
    LibraryAssetAdapter,
    PersistenceAdapter,
)
from stargallery.saver.channel import ImageSaverChannel
from stargallery.saver.dispatcher import ImageSaver
from stargallery.saver.gate import PermissionGate


def build_adapter(settings: Settings, capabilities: PlatformCapabilities) -> PersistenceAdapter:
    """Pick the persistence variant the platform supports."""
    if capabilities.uses_library_asset_api:
        logger.info(f"Saving images into the photo library at {settings.photo_library_root}")
        library = LocalPhotoLibrary(
            settings.photo_library_root,
            filepath=settings.photo_library_index_path,
            image_format=settings.photo_library_format,
        )
        return LibraryAssetAdapter(library)

    logger.info(f"Saving images into the media index at {settings.media_root}")
    media_index = LocalMediaIndex(settings.media_root, filepath=settings.media_index_path)
    purged = media_index.purge_pending(settings.pending_record_max_age_seconds)
    if purged:
        logger.info(f"Reclaimed {len(purged)} orphaned pending media records")
    return DirectRegistrationAdapter(
        media_index,
        use_pending_flag=capabilities.uses_pending_media_flag,
        relative_path=settings.media_relative_path,
        mime_type=settings.media_mime_type,
        buffer_size=settings.copy_buffer_size,
    )


def build_channel(
    *,
    settings: Settings,
    capabilities: PlatformCapabilities,
    permissions: PermissionService,
    adapter: PersistenceAdapter | None = None,
) -> ImageSaverChannel:
    """Wire the dispatcher, gate and adapter behind the host channel."""
    gate = PermissionGate(
        capabilities=capabilities,
        permissions=permissions,
        timeout=settings.permission_timeout_seconds,
    )
    saver = ImageSaver(gate=gate, adapter=adapter or build_adapter(settings, capabilities))
    return ImageSaverChannel(name=settings.channel_name, saver=saver)
