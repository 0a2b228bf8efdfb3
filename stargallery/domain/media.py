"""Media store domain models."""

from pydantic import BaseModel


class MediaValues(BaseModel):
    """Column values used to insert or update a media record.

    Unset columns are left untouched on update.
    """

    display_name: str | None = None
    mime_type: str | None = None
    relative_path: str | None = None
    is_pending: bool | None = None


class MediaRecord(BaseModel):
    """Represents an entry in the shared media index.

    Attributes:
        id: Handle of the record.
        display_name: File name shown to other apps.
        mime_type: The MIME type of the stored bytes.
        relative_path: Sub-collection the record lives in.
        data: Path of the stored bytes, relative to the media root.
        is_pending: Pending records are invisible to other consumers.
        date_added: Creation timestamp (seconds since epoch).
    """

    id: str
    display_name: str
    mime_type: str
    relative_path: str
    data: str
    is_pending: bool = False
    date_added: float


class PhotoAsset(BaseModel):
    """Represents an asset created in the photo library.

    Attributes:
        id: Local identifier of the asset.
        filename: Name of the stored file, relative to the library root.
        original_filename: Base name of the file the asset was created from.
        width: Pixel width of the stored image.
        height: Pixel height of the stored image.
        created: Creation timestamp (seconds since epoch).
    """

    id: str
    filename: str
    original_filename: str | None = None
    width: int
    height: int
    created: float
