from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from petid.app.client import IdentityServiceClient
from petid.app.preview import PreviewHandle, PreviewPool
from petid.app.projector import project
from petid.app.state import UploadSession
from petid.core.errors import Err, Ok, Outcome, ValidationError, client_error, missing_input
from petid.core.models import MatchRecord, RegistrationResult, WorkflowKind
from petid.validation.validator import ImageFile, SelectedImage, validate_image

logger = logging.getLogger(__name__)

Task = Callable[[], None]


def run_in_thread(task: Task) -> None:
    threading.Thread(target=task, daemon=True).start()


def run_inline(task: Task) -> None:
    task()


class WorkflowController:
    """
    Drives upload sessions: selection -> validation -> request -> result.

    dispatch:
        Runs the blocking request. Defaults to a daemon worker thread.
    deliver:
        Hands the finished request back to the thread that owns the sessions.
        The GUI passes `lambda cb: root.after(0, cb)`; the default calls it
        directly, which is right for the CLI and tests.
    on_change:
        Called with the session after every state change.
    on_registered:
        Called once with the new animal ID after a successful registration.
    """

    def __init__(
        self,
        client: IdentityServiceClient,
        *,
        pool: Optional[PreviewPool] = None,
        dispatch: Callable[[Task], None] = run_in_thread,
        deliver: Callable[[Task], None] = run_inline,
        on_change: Optional[Callable[[UploadSession], None]] = None,
        on_registered: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.client = client
        self.pool = pool
        self._dispatch = dispatch
        self._deliver = deliver
        self._on_change = on_change
        self._on_registered = on_registered

    def _changed(self, session: UploadSession) -> None:
        if self._on_change is not None:
            self._on_change(session)

    # ---------- Selection ----------

    def select(self, session: UploadSession, file: Optional[ImageFile]) -> bool:
        """Validate a picked file and make it the session's image. Returns True if accepted."""
        checked = validate_image(file, session.kind, pool=self.pool)
        if isinstance(checked, ValidationError):
            logger.info("%s: rejected %s (%s)", session.kind.value, file.name if file else None, checked.kind.value)
            session.reject(checked)
            self._changed(session)
            return False

        session.select(checked)
        logger.debug("%s: selected %s (generation %d)", session.kind.value, checked.name, session.generation)
        self._changed(session)
        return True

    def reset(self, session: UploadSession) -> None:
        session.reset()
        self._changed(session)

    # ---------- Submit ----------

    def submit(self, session: UploadSession) -> bool:
        """Start a request for the session's image. Returns True if a request was issued."""
        if session.busy:
            logger.debug("%s: submit ignored, a request is already pending", session.kind.value)
            return False

        if session.image is None:
            session.fail_input(missing_input(session.kind))
            self._changed(session)
            return False

        generation = session.begin()
        image = session.image
        kind = session.kind
        logger.info("%s: sending %s (generation %d)", kind.value, image.name, generation)
        self._changed(session)

        def work() -> None:
            outcome = self._exchange(kind, image)
            self._deliver(lambda: self._finish(session, generation, outcome))

        try:
            self._dispatch(work)
        except Exception as e:
            logger.exception("%s: could not start request", kind.value)
            self._finish(session, generation, Err(client_error(e)))
            return False
        return True

    def _exchange(self, kind: WorkflowKind, image: SelectedImage) -> Outcome:
        try:
            outcome = self.client.post_image(kind, image)
            if isinstance(outcome, Ok):
                outcome = project(outcome.value, kind)
        except Exception as e:
            logger.exception("%s: unexpected failure during request", kind.value)
            outcome = Err(client_error(e))
        return outcome

    def _finish(self, session: UploadSession, generation: int, outcome: Outcome) -> None:
        if not session.resolve(generation, outcome):
            logger.info(
                "%s: discarding stale response for generation %d (now %d)",
                session.kind.value,
                generation,
                session.generation,
            )
            return

        if isinstance(outcome, Err):
            # server-side failures log at WARNING
            level = logging.WARNING if outcome.error.kind.is_server else logging.INFO
            logger.log(level, "%s: failed (%s) %s", session.kind.value, outcome.error.kind.value, outcome.error.message)
        else:
            logger.info("%s: succeeded", session.kind.value)

        self._changed(session)

        if isinstance(outcome, Ok) and isinstance(outcome.value, RegistrationResult):
            if self._on_registered is not None:
                self._on_registered(outcome.value.animal_id)

    # ---------- Match images ----------

    def fetch_match_image(self, match: MatchRecord, on_done: Callable[[Outcome], None]) -> bool:
        """
        Download a search match's image in the background.

        `on_done` receives `Ok(PreviewHandle)` or `Err(WorkflowError)` on the owning
        thread. The caller owns the handle and must release it. Returns False when
        the match has no image to fetch.
        """
        url = match.image_url
        if not url:
            return False

        def work() -> None:
            try:
                outcome = self.client.fetch_image(url)
            except Exception as e:
                logger.exception("unexpected failure fetching %s", url)
                outcome = Err(client_error(e))
            self._deliver(lambda: on_done(self._as_preview(outcome)))

        try:
            self._dispatch(work)
        except Exception as e:
            logger.exception("could not start image fetch for %s", url)
            on_done(Err(client_error(e)))
        return True

    def _as_preview(self, outcome: Outcome) -> Outcome:
        if not isinstance(outcome, Ok):
            return outcome
        file = outcome.value
        if self.pool is not None:
            return Ok(self.pool.acquire(file.data, file.media_type))
        return Ok(PreviewHandle(file.data, file.media_type))
