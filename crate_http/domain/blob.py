from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BlobErrorType(Enum):
    HTTP = "http"
    CRATE = "crate"
    OTHER = "other"


@dataclass(frozen=True)
class BlobResult:
    """Outcome of a blob operation; the blob endpoints only signal through status codes.

    Fields:
        key: SHA-1 hex digest addressing the blob.
        error_string: Empty on success.
        error_type: Where the failure came from (transport, server, or client side).
    """
    key: str = ""
    error_string: str = ""
    error_type: BlobErrorType = BlobErrorType.OTHER

    def has_error(self) -> bool:
        return bool(self.error_string)

    def is_crate_error(self) -> bool:
        return self.error_type is BlobErrorType.CRATE

    def __bool__(self) -> bool:
        return not self.has_error()
