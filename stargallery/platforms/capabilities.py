"""Platform capability descriptor, resolved once when the service starts."""

from pydantic import BaseModel

ANDROID = "android"
IOS = "ios"

# First Android SDK whose media index is app-scoped for writes
ANDROID_SCOPED_STORAGE_SDK = 29


class PlatformCapabilities(BaseModel):
    """Describes how a platform gates and stores shared images.

    Attributes:
        requires_explicit_grant: Whether writes need a user-granted permission.
        uses_pending_media_flag: Whether new media records start invisible.
        uses_library_asset_api: Whether images go through the photo library.
        reprompts_after_denial: Whether a new request prompts again after a denial.
    """

    model_config = {"frozen": True}

    requires_explicit_grant: bool
    uses_pending_media_flag: bool
    uses_library_asset_api: bool
    reprompts_after_denial: bool


def resolve_capabilities(platform: str, sdk_version: int) -> PlatformCapabilities:
    """Resolve the capability descriptor for a platform and OS version."""
    platform = platform.lower()
    if platform == ANDROID:
        scoped = sdk_version >= ANDROID_SCOPED_STORAGE_SDK
        return PlatformCapabilities(
            requires_explicit_grant=not scoped,
            uses_pending_media_flag=scoped,
            uses_library_asset_api=False,
            reprompts_after_denial=True,
        )
    if platform == IOS:
        return PlatformCapabilities(
            requires_explicit_grant=True,
            uses_pending_media_flag=False,
            uses_library_asset_api=True,
            reprompts_after_denial=False,
        )
    raise ValueError(f"Unsupported platform: {platform}")
