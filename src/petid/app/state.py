from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from petid.core.errors import Err, Ok, Outcome, WorkflowError
from petid.core.models import ResultPayload, WorkflowKind
from petid.validation.validator import SelectedImage


class SessionState(str, Enum):
    EMPTY = "empty"
    SELECTED = "selected"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class UploadSession:
    """
    Mutable state for one workflow (Register or Search).

    The GUI reads this state; only the WorkflowController drives transitions
    (select -> submit -> resolve). `generation` increases on every new selection
    or reset, so a response tagged with an older generation can be recognised as
    stale and dropped.
    """
    kind: WorkflowKind
    image: Optional[SelectedImage] = None
    state: SessionState = SessionState.EMPTY
    error: Optional[WorkflowError] = None
    result: Optional[ResultPayload] = None
    generation: int = 0

    @property
    def busy(self) -> bool:
        return self.state is SessionState.PENDING

    @property
    def can_submit(self) -> bool:
        return self.image is not None and not self.busy

    def _discard_image(self) -> None:
        if self.image is not None:
            self.image.release()
            self.image = None

    def select(self, image: SelectedImage) -> int:
        """Adopt a validated image; drops any prior image, result, or error."""
        self._discard_image()
        self.image = image
        self.state = SessionState.SELECTED
        self.error = None
        self.result = None
        self.generation += 1
        return self.generation

    def reject(self, error: WorkflowError) -> int:
        """A selection failed validation; nothing stays selected."""
        self._discard_image()
        self.state = SessionState.FAILED
        self.error = error
        self.result = None
        self.generation += 1
        return self.generation

    def fail_input(self, error: WorkflowError) -> None:
        """Submit was attempted without an image."""
        self.state = SessionState.FAILED
        self.error = error
        self.result = None

    def begin(self) -> int:
        """Enter Pending and return the generation the request belongs to."""
        if not self.can_submit:
            raise RuntimeError(f"{self.kind.value} session cannot submit from state {self.state.value}")
        self.state = SessionState.PENDING
        self.error = None
        self.result = None
        return self.generation

    def is_current(self, generation: int) -> bool:
        return self.busy and generation == self.generation

    def resolve(self, generation: int, outcome: Outcome) -> bool:
        """
        Apply a request outcome. Returns False (and changes nothing) when the
        outcome belongs to a request the session has moved on from.
        """
        if not self.is_current(generation):
            return False

        if isinstance(outcome, Ok):
            self.state = SessionState.SUCCEEDED
            self.result = outcome.value
            self.error = None
            if self.kind is WorkflowKind.REGISTER:
                # Registration is one-shot: the form resets after success.
                self._discard_image()
        elif isinstance(outcome, Err):
            self.state = SessionState.FAILED
            self.error = outcome.error
            self.result = None
        else:
            raise TypeError(f"unexpected outcome {outcome!r}")
        return True

    def reset(self) -> None:
        """Back to Empty, releasing the preview. Any in-flight response becomes stale."""
        self._discard_image()
        self.state = SessionState.EMPTY
        self.error = None
        self.result = None
        self.generation += 1

    def close(self) -> None:
        self.reset()

    def __enter__(self) -> "UploadSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
