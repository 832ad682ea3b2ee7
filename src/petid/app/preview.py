from __future__ import annotations

import io
import itertools
import logging
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # avoid importing Pillow at module import time
    from PIL import Image

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class PreviewRevokedError(RuntimeError):
    pass


class PreviewHandle:
    """
    Revocable reference to in-memory image bytes, used to display a selection
    without re-reading it from disk. The bytes are kept as-is (never re-encoded);
    a Pillow image is decoded lazily the first time the GUI asks for one.
    """

    def __init__(self, data: bytes, media_type: str, pool: Optional["PreviewPool"] = None):
        self.token = f"preview:{next(_ids)}"
        self.media_type = media_type
        self._data: Optional[bytes] = data
        self._image: Optional["Image.Image"] = None
        self._pool = pool

    @property
    def revoked(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise PreviewRevokedError(f"{self.token} has been released")
        return self._data

    def image(self) -> "Image.Image":
        """Decode the preview for display (cached until release)."""
        from PIL import Image

        if self._image is None:
            img = Image.open(io.BytesIO(self.data))
            img.load()
            self._image = img
        return self._image

    def release(self) -> None:
        """
        Drop the bytes and any decoded image. Safe to call multiple times.
        """
        if self._data is None:
            return
        self._data = None
        if self._image is not None:
            try:
                self._image.close()
            except Exception:
                logger.debug("closing decoded preview %s failed", self.token, exc_info=True)
            self._image = None
        if self._pool is not None:
            self._pool._forget(self)

    def __enter__(self) -> "PreviewHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "revoked" if self.revoked else f"{len(self._data or b'')} bytes"
        return f"PreviewHandle({self.token}, {self.media_type}, {state})"


class PreviewPool:
    """
    Tracks live preview handles for one window so anything still outstanding can
    be released when the window goes away.
    """

    def __init__(self) -> None:
        self._live: Dict[str, PreviewHandle] = {}

    def acquire(self, data: bytes, media_type: str) -> PreviewHandle:
        handle = PreviewHandle(data, media_type, pool=self)
        self._live[handle.token] = handle
        return handle

    @property
    def live_count(self) -> int:
        return len(self._live)

    def _forget(self, handle: PreviewHandle) -> None:
        self._live.pop(handle.token, None)

    def release_all(self) -> None:
        if self._live:
            logger.debug("releasing %d outstanding preview handle(s)", len(self._live))
        for handle in list(self._live.values()):
            handle.release()
