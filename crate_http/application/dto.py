from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Union

BlobSource = Union[str, Path, BinaryIO]


@dataclass(frozen=True)
class RefreshRequest:
    table: str


@dataclass(frozen=True)
class CreateBlobStorageRequest:
    table: str
    shards: int = -1
    replicas: int = -1
    path: str = ""


@dataclass(frozen=True)
class BlobKeyRequest:
    table: str
    key: str


@dataclass(frozen=True)
class UploadBlobRequest:
    table: str
    source: BlobSource


@dataclass(frozen=True)
class DownloadBlobRequest:
    table: str
    key: str
    target: BlobSource
