from __future__ import annotations

import os

DEFAULT_HTTP_TIMEOUT = 15.0


def http_timeout_seconds() -> float:
    """Per-request timeout from CRATE_HTTP_TIMEOUT; invalid or non-positive values use the default."""
    try:
        value = float(os.getenv("CRATE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT)))
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT
