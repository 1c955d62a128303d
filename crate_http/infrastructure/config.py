from __future__ import annotations

import os
from typing import List, Optional

from ..domain.models import DEFAULT_URL, ConnectionPolicy, Node


def env_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


def crate_urls() -> List[str]:
    """Node urls from CRATE_URLS (comma separated), else CRATE_URL."""
    raw = os.getenv("CRATE_URLS", "")
    urls = [u.strip().rstrip("/") for u in raw.split(",") if u.strip()]
    return urls or [env_str("CRATE_URL", DEFAULT_URL).rstrip("/")]


def crate_user() -> str:
    return os.getenv("CRATE_USER", "").strip()


def crate_password() -> str:
    return os.getenv("CRATE_PASSWORD", "")


def default_schema() -> Optional[str]:
    schema = os.getenv("CRATE_DEFAULT_SCHEMA", "").strip()
    return schema or None


def connection_policy() -> ConnectionPolicy:
    return ConnectionPolicy.parse(env_str("CRATE_CONNECTION_POLICY", ConnectionPolicy.STICKY_LAST_SUCCESSFUL.value))


def configured_nodes() -> List[Node]:
    """All configured nodes, sharing the configured credentials."""
    user, password = crate_user(), crate_password()
    return [Node(url, user, password) for url in crate_urls()]
