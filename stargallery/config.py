from pydantic_settings import BaseSettings

from stargallery.domain.permissions import AuthorizationStatus


class Settings(BaseSettings):
    # Platform the saver runs against, resolved once at startup
    platform: str = "android"
    sdk_version: int = 34

    # Host channel settings
    channel_name: str = "my_app/image_saver"

    # Media index settings (direct registration)
    media_root: str = "data/media"
    media_index_path: str = "data/media_index.json"
    media_relative_path: str = "Pictures/StarGallery"
    media_mime_type: str = "image/jpeg"
    copy_buffer_size: int = 64 * 1024
    pending_record_max_age_seconds: float = 24 * 60 * 60

    # Photo library settings (library asset API)
    photo_library_root: str = "data/photos"
    photo_library_index_path: str = "data/photos.json"
    photo_library_format: str = "JPEG"

    # Permission settings
    initial_permission_status: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED
    permission_timeout_seconds: float | None = None

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
