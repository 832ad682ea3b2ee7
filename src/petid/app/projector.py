from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping

from petid.core.errors import Err, Ok, Outcome, invalid_response
from petid.core.models import MatchRecord, RegistrationResult, SearchResult, WorkflowKind


class _Malformed(ValueError):
    pass


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise _Malformed("'registered_at' is not a timestamp string")
    text = value.strip()
    # fromisoformat() only accepts a literal "Z" from Python 3.11 on.
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise _Malformed(f"'registered_at' is not ISO-8601: {value!r}") from None


def _match_record(raw: Any, index: int) -> MatchRecord:
    if not isinstance(raw, Mapping):
        raise _Malformed(f"match #{index} is not an object")

    animal_id = raw.get("animal_id")
    if not isinstance(animal_id, str):
        raise _Malformed(f"match #{index} has no 'animal_id'")

    similarity = raw.get("similarity")
    if isinstance(similarity, bool) or not isinstance(similarity, (int, float)):
        raise _Malformed(f"match #{index} has no numeric 'similarity'")

    image_url = raw.get("image_url")
    if image_url is not None and not isinstance(image_url, str):
        raise _Malformed(f"match #{index} has a non-string 'image_url'")

    return MatchRecord(
        animal_id=animal_id,
        similarity=float(similarity),
        registered_at=_parse_timestamp(raw.get("registered_at")),
        image_url=image_url or None,
    )


def _project_registration(raw: Mapping[str, Any]) -> RegistrationResult:
    animal_id = raw.get("animal_id")
    if not isinstance(animal_id, str) or not animal_id:
        raise _Malformed("response has no 'animal_id'")
    return RegistrationResult(animal_id=animal_id)


def _project_search(raw: Mapping[str, Any]) -> SearchResult:
    matches = raw.get("matches")
    if matches is None:
        return SearchResult()
    if not isinstance(matches, list):
        raise _Malformed("'matches' is not a list")
    records: List[MatchRecord] = [_match_record(m, i) for i, m in enumerate(matches)]
    return SearchResult(matches=tuple(records))


def project(raw: Any, kind: WorkflowKind) -> Outcome:
    """
    Map a 2xx response body onto the payload the UI renders.

    This is a structural projection only: fields are checked for presence and
    type, matches keep the server's order, and scores are taken as given. A search
    without a `matches` field is an empty result, not an error.
    """
    try:
        if not isinstance(raw, Mapping):
            raise _Malformed("response is not a JSON object")
        if kind is WorkflowKind.REGISTER:
            return Ok(_project_registration(raw))
        return Ok(_project_search(raw))
    except _Malformed as e:
        return Err(invalid_response(kind, str(e)))
