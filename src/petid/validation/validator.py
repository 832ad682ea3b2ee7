from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from petid.app.preview import PreviewHandle, PreviewPool
from petid.core.errors import ValidationError, invalid_file_type, missing_input
from petid.core.models import REGISTER_MEDIA_TYPES, WorkflowKind

UNKNOWN_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ImageFile:
    """A file the user picked: its name, raw bytes, and media type."""
    name: str
    data: bytes
    media_type: str

    @staticmethod
    def from_path(path: Union[str, Path]) -> "ImageFile":
        """
        Read a file from disk. The media type is guessed from the file name,
        the same way a browser file picker labels a selection.
        """
        p = Path(path)
        media_type, _ = mimetypes.guess_type(p.name)
        return ImageFile(name=p.name, data=p.read_bytes(), media_type=media_type or UNKNOWN_MEDIA_TYPE)


@dataclass(frozen=True)
class SelectedImage:
    """A validated selection owned by exactly one upload session."""
    file: ImageFile
    preview: PreviewHandle

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def media_type(self) -> str:
        return self.file.media_type

    @property
    def data(self) -> bytes:
        return self.file.data

    def release(self) -> None:
        self.preview.release()


def validate_image(
    file: Optional[ImageFile],
    kind: WorkflowKind,
    pool: Optional[PreviewPool] = None,
) -> Union[SelectedImage, ValidationError]:
    """
    Check a picked file against the workflow's type rules.

    Register only accepts JPEG and PNG. Search accepts any type and leaves it to
    the service to reject what it cannot read.
    """
    if file is None:
        return missing_input(kind)

    if kind is WorkflowKind.REGISTER and file.media_type not in REGISTER_MEDIA_TYPES:
        return invalid_file_type()

    if pool is not None:
        preview = pool.acquire(file.data, file.media_type)
    else:
        preview = PreviewHandle(file.data, file.media_type)
    return SelectedImage(file=file, preview=preview)
