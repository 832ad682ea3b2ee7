from __future__ import annotations

import logging
import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import Callable, Dict, Optional, Tuple

from petid.app.client import IdentityServiceClient
from petid.app.controller import WorkflowController
from petid.app.preview import PreviewHandle, PreviewPool
from petid.app.render import SessionView, render_session, similarity_text, timestamp_text
from petid.app.state import UploadSession
from petid.core.config import ServiceConfig
from petid.core.errors import Err
from petid.core.models import MatchRecord, WorkflowKind
from petid.ui.image_canvas import PreviewCanvas
from petid.validation.validator import ImageFile

logger = logging.getLogger(__name__)

_TITLES = {
    WorkflowKind.REGISTER: ("Register New Animal", "Upload an image to register a new animal.", "Register Animal"),
    WorkflowKind.SEARCH: ("Search Animal", "Upload an image to search for a registered animal.", "Search"),
}


class WorkflowPanel(ttk.LabelFrame):
    """One workflow's form: pick an image, preview it, submit, and show the outcome."""

    def __init__(
        self,
        master,
        kind: WorkflowKind,
        *,
        on_choose: Callable[[], None],
        on_submit: Callable[[], None],
        on_match_selected: Optional[Callable[[MatchRecord], None]] = None,
    ):
        title, description, submit_text = _TITLES[kind]
        super().__init__(master, text=title, padding=10)
        self.kind = kind
        self._submit_text = submit_text

        ttk.Label(self, text=description).pack(side="top", anchor="w")

        row = ttk.Frame(self)
        row.pack(side="top", fill="x", pady=(8, 0))
        self.btn_choose = ttk.Button(row, text="Upload Image…", command=on_choose)
        self.btn_choose.pack(side="left")
        self.file_label = ttk.Label(row, text="No file chosen.")
        self.file_label.pack(side="left", padx=(8, 0))

        self.preview = PreviewCanvas(self)
        self.preview.pack(side="top", anchor="w", pady=(8, 0))

        actions = ttk.Frame(self)
        actions.pack(side="top", fill="x", pady=(8, 0))
        self.btn_submit = ttk.Button(actions, text=submit_text, command=on_submit)
        self.btn_submit.pack(side="left")
        self.progress = ttk.Progressbar(actions, mode="indeterminate", length=120)
        self.progress.pack(side="left", padx=(8, 0))

        self.error_label = ttk.Label(self, text="", foreground="#b91c1c", wraplength=460)
        self.error_label.pack(side="top", anchor="w", pady=(8, 0))

        self.headline = ttk.Label(self, text="", foreground="#15803d")
        self.headline.pack(side="top", anchor="w", pady=(4, 0))

        self.tree = None
        self.match_image = None
        self._matches: Tuple[MatchRecord, ...] = ()
        self._match_handle: Optional[PreviewHandle] = None
        if kind is WorkflowKind.SEARCH:
            results = ttk.Frame(self)
            results.pack(side="top", fill="both", expand=True, pady=(6, 0))

            columns = ("animal_id", "similarity", "registered_at")
            self.tree = ttk.Treeview(results, columns=columns, show="headings", height=6, selectmode="browse")
            self.tree.heading("animal_id", text="Animal ID")
            self.tree.heading("similarity", text="Similarity")
            self.tree.heading("registered_at", text="Registered At")
            self.tree.column("animal_id", width=180, stretch=True)
            self.tree.column("similarity", width=90, stretch=False)
            self.tree.column("registered_at", width=150, stretch=False)
            self.tree.pack(side="left", fill="both", expand=True)

            self.match_image = PreviewCanvas(results, size=(128, 128))
            self.match_image.pack(side="left", anchor="n", padx=(8, 0))
            if on_match_selected is not None:
                self.tree.bind("<<TreeviewSelect>>", lambda _e: self._on_tree_select(on_match_selected))

    @property
    def matches(self) -> Tuple[MatchRecord, ...]:
        return self._matches

    def _on_tree_select(self, callback: Callable[[MatchRecord], None]) -> None:
        selection = self.tree.selection()
        if selection:
            callback(self._matches[int(selection[0])])

    def set_match_image(self, handle: Optional[PreviewHandle]) -> None:
        """Show a match's downloaded image; the panel owns the handle from here on."""
        if self._match_handle is not None and self._match_handle is not handle:
            self._match_handle.release()
        self._match_handle = handle
        if self.match_image is not None:
            self.match_image.show(handle)

    def render(self, view: SessionView) -> None:
        self.file_label.configure(text=view.file_name or "No file chosen.")
        self.preview.show(view.preview)

        if view.busy:
            self.btn_submit.configure(text=view.busy_text or self._submit_text)
            self.btn_submit.state(["disabled"])
            self.progress.start(12)
        else:
            self.btn_submit.configure(text=self._submit_text)
            self.btn_submit.state(["!disabled"])
            self.progress.stop()

        self.error_label.configure(text=view.error or "")
        self.headline.configure(text=view.headline or "")

        if self.tree is not None and view.matches is not self._matches:
            self._matches = view.matches
            self.set_match_image(None)
            for iid in self.tree.get_children():
                self.tree.delete(iid)
            for i, match in enumerate(view.matches):
                values = (match.animal_id, similarity_text(match.similarity), timestamp_text(match))
                self.tree.insert("", "end", iid=str(i), values=values)


class PetIdApp(ttk.Frame):
    """Animal Face ID window: a Register panel and a Search panel, each with its own session."""

    def __init__(self, master: tk.Tk, client: IdentityServiceClient):
        super().__init__(master)
        self.master = master
        self.client = client
        self.pool = PreviewPool()

        self.sessions: Dict[WorkflowKind, UploadSession] = {
            WorkflowKind.REGISTER: UploadSession(WorkflowKind.REGISTER),
            WorkflowKind.SEARCH: UploadSession(WorkflowKind.SEARCH),
        }
        self.controller = WorkflowController(
            client,
            pool=self.pool,
            deliver=lambda cb: self.master.after(0, cb),
            on_change=self.refresh,
            on_registered=self.on_registered,
        )

        self._match_request = 0

        self._build_layout()
        self._bind_shortcuts()
        self.master.protocol("WM_DELETE_WINDOW", self.on_close)

        for session in self.sessions.values():
            self.refresh(session)
        self.set_status(f"Service: {client.config.base_url}")

    # ---------- UI construction ----------

    def _build_layout(self) -> None:
        self.pack(fill="both", expand=True)

        header = ttk.Label(self, text="Animal Face ID System", font=("TkDefaultFont", 18, "bold"), padding=(10, 10))
        header.pack(side="top")

        self.panels: Dict[WorkflowKind, WorkflowPanel] = {}
        for kind in (WorkflowKind.REGISTER, WorkflowKind.SEARCH):
            panel = WorkflowPanel(
                self,
                kind,
                on_choose=lambda k=kind: self.on_choose(k),
                on_submit=lambda k=kind: self.on_submit(k),
                on_match_selected=self.on_match_selected if kind is WorkflowKind.SEARCH else None,
            )
            panel.pack(side="top", fill="both", expand=kind is WorkflowKind.SEARCH, padx=10, pady=(0, 10))
            self.panels[kind] = panel

        status = ttk.Frame(self, padding=(10, 6))
        status.pack(side="bottom", fill="x")
        self.status_var = tk.StringVar(value="Ready.")
        ttk.Label(status, textvariable=self.status_var).pack(side="left")

    def _bind_shortcuts(self) -> None:
        self.master.bind_all("<Control-o>", lambda e: self.on_choose(WorkflowKind.REGISTER))
        self.master.bind_all("<Control-f>", lambda e: self.on_choose(WorkflowKind.SEARCH))

    # ---------- Utilities ----------

    def set_status(self, text: str) -> None:
        self.status_var.set(text)

    def refresh(self, session: UploadSession) -> None:
        panel = self.panels[session.kind]
        view = render_session(session)
        if view.matches is not panel.matches:
            self._match_request += 1  # drop any image still loading for the old rows
        panel.render(view)

    # ---------- Actions ----------

    def on_choose(self, kind: WorkflowKind) -> None:
        path = filedialog.askopenfilename(
            title="Select an image",
            filetypes=[
                ("Image files", "*.jpg *.jpeg *.png *.bmp *.gif *.webp"),
                ("All files", "*.*"),
            ],
        )
        if not path:
            return

        try:
            file = ImageFile.from_path(path)
        except OSError as e:
            messagebox.showerror("Upload failed", f"Could not read file.\n\n{e}")
            self.set_status("Upload failed.")
            return

        if self.controller.select(self.sessions[kind], file):
            self.set_status(f"Selected {file.name}.")

    def on_submit(self, kind: WorkflowKind) -> None:
        if self.controller.submit(self.sessions[kind]):
            self.set_status("Registering…" if kind is WorkflowKind.REGISTER else "Searching…")

    def on_registered(self, animal_id: str) -> None:
        self.set_status(f"Registered {animal_id}.")
        messagebox.showinfo("Registered", f"Animal registered successfully! ID: {animal_id}")

    def on_match_selected(self, match: MatchRecord) -> None:
        self._match_request += 1
        request = self._match_request
        if self.controller.fetch_match_image(match, lambda outcome: self._show_match_image(request, outcome)):
            self.set_status(f"Loading image for {match.animal_id}…")
        else:
            self.panels[WorkflowKind.SEARCH].set_match_image(None)

    def _show_match_image(self, request: int, outcome) -> None:
        if request != self._match_request:
            # another row was picked meanwhile
            if not isinstance(outcome, Err):
                outcome.value.release()
            return
        panel = self.panels[WorkflowKind.SEARCH]
        if isinstance(outcome, Err):
            panel.set_match_image(None)
            self.set_status(outcome.error.message)
        else:
            panel.set_match_image(outcome.value)
            self.set_status("Ready.")

    def on_close(self) -> None:
        for session in self.sessions.values():
            session.close()
        self.panels[WorkflowKind.SEARCH].set_match_image(None)
        self.pool.release_all()
        self.client.close()
        self.master.destroy()


def run(config: ServiceConfig | None = None) -> None:
    root = tk.Tk()
    root.title("Animal Face ID")
    root.geometry("760x820")
    root.minsize(600, 600)

    client = IdentityServiceClient(config or ServiceConfig.from_env())
    PetIdApp(root, client)

    root.mainloop()
