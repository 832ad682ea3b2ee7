from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk
from typing import Optional, Tuple

from PIL import Image, ImageTk

from petid.app.preview import PreviewHandle, PreviewRevokedError

logger = logging.getLogger(__name__)


class PreviewCanvas(ttk.Frame):
    """A canvas that shows a selection's preview handle scaled to fit."""

    def __init__(self, master, *, bg: str = "#f3f3f3", size: Tuple[int, int] = (160, 160)):
        super().__init__(master)
        self._canvas = tk.Canvas(self, highlightthickness=0, bg=bg, width=size[0], height=size[1])
        self._canvas.pack(fill="both", expand=True)

        self._photo: Optional[ImageTk.PhotoImage] = None
        self._handle: Optional[PreviewHandle] = None

        self._canvas.bind("<Configure>", lambda _evt: self._redraw())

        self._placeholder_id = self._canvas.create_text(
            10, 10, anchor="nw",
            text="No image selected",
            fill="#555",
            font=("TkDefaultFont", 11),
        )

    def show(self, handle: Optional[PreviewHandle]) -> None:
        if handle is self._handle:
            return
        self._handle = handle
        self._redraw()

    def clear(self) -> None:
        self.show(None)

    @staticmethod
    def _fit_size(img_w: int, img_h: int, box_w: int, box_h: int) -> Tuple[int, int]:
        if img_w <= 0 or img_h <= 0 or box_w <= 2 or box_h <= 2:
            return (1, 1)
        scale = min(box_w / img_w, box_h / img_h)
        return max(1, int(img_w * scale)), max(1, int(img_h * scale))

    def _redraw(self) -> None:
        self._canvas.delete("img")
        self._photo = None

        pil = None
        if self._handle is not None and not self._handle.revoked:
            try:
                pil = self._handle.image()
            except PreviewRevokedError:
                pil = None
            except Exception as e:
                # Search accepts any file type, so the bytes may not be an image Pillow can read.
                logger.info("cannot decode preview %s: %s", self._handle.token, e)

        if pil is None:
            text = "No image selected" if self._handle is None else "Preview unavailable"
            self._canvas.itemconfigure(self._placeholder_id, text=text, state="normal")
            return

        self._canvas.itemconfigure(self._placeholder_id, state="hidden")

        w = max(1, self._canvas.winfo_width())
        h = max(1, self._canvas.winfo_height())
        new_w, new_h = self._fit_size(pil.width, pil.height, w, h)
        resized = pil.convert("RGB").resize((new_w, new_h), Image.LANCZOS)

        self._photo = ImageTk.PhotoImage(resized)
        self._canvas.create_image((w - new_w) // 2, (h - new_h) // 2, anchor="nw", image=self._photo, tags=("img",))
