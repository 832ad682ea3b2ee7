from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union


class WorkflowKind(str, Enum):
    """Which of the two identity-service operations a session drives."""
    REGISTER = "register"
    SEARCH = "search"

    @property
    def endpoint(self) -> str:
        return f"/{self.value}"

    @property
    def verb(self) -> str:
        # Used in user-facing failure messages ("Error registering animal: ...").
        return "registering" if self is WorkflowKind.REGISTER else "searching for"


# Register accepts only these two raster formats; Search accepts anything.
REGISTER_MEDIA_TYPES: Tuple[str, ...] = ("image/jpeg", "image/png")


@dataclass(frozen=True)
class RegistrationResult:
    animal_id: str


@dataclass(frozen=True)
class MatchRecord:
    """
    One candidate returned by a search.

    similarity:
        Server score in [0, 1]; never recomputed client-side.
    image_url:
        Optional link to the registered image.
    """
    animal_id: str
    similarity: float
    registered_at: datetime
    image_url: Optional[str] = None


@dataclass(frozen=True)
class SearchResult:
    """Ordered matches exactly as the service returned them. Empty means "no match"."""
    matches: Tuple[MatchRecord, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.matches

    def __len__(self) -> int:
        return len(self.matches)


ResultPayload = Union[RegistrationResult, SearchResult]
