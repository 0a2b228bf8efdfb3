from tests.fakes.fake_media_index import FakeMediaIndex
from tests.fakes.fake_permissions import FakePermissionService
from tests.fakes.fake_photo_library import FakePhotoLibrary

__all__ = ["FakeMediaIndex", "FakePermissionService", "FakePhotoLibrary"]
