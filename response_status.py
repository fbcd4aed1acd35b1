# Classifies the coarse "status" token returned by the Google web services.

from dataclasses import dataclass
from enum import Enum


class StatusKind(Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    ZERO_RESULTS = "ZERO_RESULTS"
    MAX_WAYPOINTS_EXCEEDED = "MAX_WAYPOINTS_EXCEEDED"
    INVALID_REQUEST = "INVALID_REQUEST"
    OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"
    REQUEST_DENIED = "REQUEST_DENIED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class UnknownStatusError(ValueError):
    """Raised in strict mode for a status token outside StatusKind."""

    def __init__(self, raw: str):
        super().__init__(f"Unrecognized response status: {raw!r}")
        self.raw = raw


@dataclass(frozen=True)
class ResponseStatus:
    """
    Outcome of a single request.

    `recognized` is False when the server sent a token this module does not
    know. Such a status is still reported as OK, so callers that care must
    check `recognized` themselves.
    """
    kind: StatusKind
    raw: str = ""
    recognized: bool = True

    @property
    def success(self) -> bool:
        return self.kind is StatusKind.OK


def classify_status(raw: str | None, strict: bool = False) -> ResponseStatus:
    """Maps a raw status token (case-insensitive) to a ResponseStatus."""
    raw = raw or ""
    token = raw.strip().upper()
    try:
        return ResponseStatus(kind=StatusKind(token), raw=raw)
    except ValueError:
        if strict:
            raise UnknownStatusError(raw)
        # Unknown tokens fall back to OK, the long-standing behavior.
        return ResponseStatus(kind=StatusKind.OK, raw=raw, recognized=False)
