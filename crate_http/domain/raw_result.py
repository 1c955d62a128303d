from __future__ import annotations

import json
from dataclasses import dataclass

from . import json_codec

BULK_ERROR_ROWCOUNT = -2


@dataclass(frozen=True)
class RawResult:
    """Undecoded server reply.

    Fields:
        reply: Response body as text.
        http_status_code: HTTP status, or -1 when no response was observed.
    """
    reply: str = ""
    http_status_code: int = -1

    def is_empty(self) -> bool:
        return self.http_status_code == -1 and not self.reply

    def has_error(self) -> bool:
        """Whether the reply is empty, malformed, an error object or a failed bulk.

        The body is parsed on every call; cache the answer when calling repeatedly.
        """
        if not self.reply:
            return True
        try:
            doc = json_codec.loads(self.reply)
        except json.JSONDecodeError:
            return True
        if json_codec.has_member(doc, "error"):
            return True
        return bool(bulk_error_positions(doc))

    def __bool__(self) -> bool:
        return not self.has_error()


def bulk_error_positions(doc: object) -> list:
    """1-based positions of ``results`` entries whose rowcount marks a failed bulk item."""
    if not json_codec.has_member(doc, "results"):
        return []
    results = doc["results"]  # type: ignore[index]
    if not isinstance(results, list):
        return []
    positions = []
    for i, item in enumerate(results, start=1):
        if not json_codec.has_member(item, "rowcount"):
            continue
        rowcount = item["rowcount"]
        if json_codec.is_integer(rowcount) and rowcount == BULK_ERROR_ROWCOUNT:
            positions.append(i)
    return positions
