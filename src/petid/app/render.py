from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from petid.app.preview import PreviewHandle
from petid.app.state import SessionState, UploadSession
from petid.core.models import MatchRecord, RegistrationResult, SearchResult, WorkflowKind

NO_MATCHES_TEXT = "No matching results found."

_BUSY_TEXT = {
    WorkflowKind.REGISTER: "Registering...",
    WorkflowKind.SEARCH: "Searching...",
}


def registration_text(result: RegistrationResult) -> str:
    return f"Registered Animal ID: {result.animal_id}"


def similarity_text(similarity: float) -> str:
    return f"{similarity * 100:.2f}%"


def timestamp_text(match: MatchRecord) -> str:
    ts = match.registered_at
    if ts.tzinfo is not None:
        ts = ts.astimezone()  # show in local time
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def match_card_lines(match: MatchRecord) -> List[str]:
    lines = [
        f"Animal ID: {match.animal_id}",
        f"Similarity: {similarity_text(match.similarity)}",
        f"Registered At: {timestamp_text(match)}",
    ]
    if match.image_url:
        lines.append(f"Image: {match.image_url}")
    return lines


def format_search_text(result: SearchResult) -> str:
    lines: List[str] = ["Search Results", "-" * 14]
    if result.is_empty:
        lines.append(NO_MATCHES_TEXT)
        return "\n".join(lines)
    for i, match in enumerate(result.matches):
        if i:
            lines.append("")
        lines.extend(match_card_lines(match))
    return "\n".join(lines)


@dataclass(frozen=True)
class SessionView:
    """Everything a panel needs to draw one session."""
    kind: WorkflowKind
    state: SessionState
    busy: bool
    can_submit: bool
    busy_text: Optional[str]
    error: Optional[str]
    preview: Optional[PreviewHandle]
    file_name: Optional[str]
    headline: Optional[str]
    cards: Tuple[Tuple[str, ...], ...]
    matches: Tuple[MatchRecord, ...]


def render_session(session: UploadSession) -> SessionView:
    headline: Optional[str] = None
    cards: Tuple[Tuple[str, ...], ...] = ()
    matches: Tuple[MatchRecord, ...] = ()

    result = session.result
    if isinstance(result, RegistrationResult):
        headline = registration_text(result)
    elif isinstance(result, SearchResult):
        if result.is_empty:
            headline = NO_MATCHES_TEXT
        else:
            headline = f"{len(result)} match(es)"
            matches = result.matches
            cards = tuple(tuple(match_card_lines(m)) for m in matches)

    image = session.image
    return SessionView(
        kind=session.kind,
        state=session.state,
        busy=session.busy,
        can_submit=session.can_submit,
        busy_text=_BUSY_TEXT[session.kind] if session.busy else None,
        error=session.error.message if session.error is not None else None,
        preview=image.preview if image is not None else None,
        file_name=image.name if image is not None else None,
        headline=headline,
        cards=cards,
        matches=matches,
    )
