from pathlib import Path

import pytest
from PIL import Image

from stargallery.config import Settings
from stargallery.platforms.capabilities import PlatformCapabilities, resolve_capabilities
from tests.fakes import FakeMediaIndex, FakePhotoLibrary


@pytest.fixture
def source_image(tmp_path: Path) -> Path:
    """A small JPEG produced by the host application."""
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (8, 6), color=(200, 30, 30)).save(path, format="JPEG")
    return path


@pytest.fixture
def not_an_image(tmp_path: Path) -> Path:
    path = tmp_path / "notes.jpg"
    path.write_bytes(b"definitely not a jpeg")
    return path


@pytest.fixture
def scoped_android() -> PlatformCapabilities:
    """Android with an app-scoped media index (no grant needed, pending flag)."""
    return resolve_capabilities("android", 34)


@pytest.fixture
def legacy_android() -> PlatformCapabilities:
    """Android requiring the storage permission."""
    return resolve_capabilities("android", 28)


@pytest.fixture
def ios() -> PlatformCapabilities:
    return resolve_capabilities("ios", 17)


@pytest.fixture
def fake_media_index() -> FakeMediaIndex:
    return FakeMediaIndex()


@pytest.fixture
def fake_photo_library() -> FakePhotoLibrary:
    return FakePhotoLibrary()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at a temporary folder."""
    return Settings(
        media_root=str(tmp_path / "media"),
        media_index_path=str(tmp_path / "media_index.json"),
        photo_library_root=str(tmp_path / "photos"),
        photo_library_index_path=str(tmp_path / "photos.json"),
    )
