from __future__ import annotations

import hashlib
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Optional

from ..dto import BlobKeyRequest, BlobSource, CreateBlobStorageRequest, DownloadBlobRequest, UploadBlobRequest
from ..executor import FailoverExecutor
from ..request_builder import blob_path
from ...domain.blob import BlobErrorType, BlobResult
from ...domain.errors import NotConnectedError, TransportError
from ...domain.interfaces import HttpRequest, SqlExecutor
from ...domain.raw_result import RawResult
from ...infrastructure.logging import get_logger

logger = get_logger("crate_http.blobs")

HASH_CHUNK_BYTES = 64 * 1024


def missing_blob_message(key: str) -> str:
    return f"Blob with the key '{key}' does not exist."


def create_blob_table_sql(req: CreateBlobStorageRequest) -> str:
    sql = f"CREATE BLOB TABLE {req.table}"
    if req.shards > -1:
        sql += f" CLUSTERED INTO {req.shards} SHARDS"
    if req.replicas > -1:
        sql += f" WITH (number_of_replicas={req.replicas}"
        if req.path:
            sql += f",blobs_path='{req.path}'"
        sql += ")"
    elif req.path:
        sql += f" WITH (blobs_path='{req.path}')"
    return sql


def sha1_key(stream: BinaryIO) -> Optional[str]:
    """SHA-1 hex digest of the whole stream, rewound afterwards; None when unreadable."""
    digest = hashlib.sha1()
    try:
        stream.seek(0)
        for chunk in iter(lambda: stream.read(HASH_CHUNK_BYTES), b""):
            digest.update(chunk)
        stream.seek(0)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Blob key failed | error=%s", exc)
        return None
    return digest.hexdigest()


@contextmanager
def _opened(target: BlobSource, mode: str) -> Iterator[BinaryIO]:
    if isinstance(target, (str, Path)):
        with open(target, mode) as fh:
            yield fh
    else:
        yield target


def _transfer(
    executor: FailoverExecutor,
    request: HttpRequest,
    key: str,
    expected: int,
    failures: Dict[int, str],
) -> BlobResult:
    """Dispatch a blob request and judge it by the bare status code."""
    try:
        response = executor.dispatch(request)
    except NotConnectedError as exc:
        return BlobResult(key, exc.message, BlobErrorType.OTHER)
    except TransportError as exc:
        return BlobResult(key, exc.message, BlobErrorType.HTTP)
    status = response.status_code
    if status == expected:
        return BlobResult(key)
    message = failures.get(status, f"Unexpected HTTP status {status} for blob with the key '{key}'.")
    logger.info("Blob request rejected | method=%s | key=%s | status=%d", request.method, key, status)
    return BlobResult(key, message, BlobErrorType.CRATE)


class CreateBlobStorageUseCase:
    """Use-case: create a blob table (optional shards, replicas and storage path)."""

    def __init__(self, sql: SqlExecutor) -> None:
        self._sql = sql

    def execute(self, req: CreateBlobStorageRequest) -> RawResult:
        return self._sql.exec_raw(create_blob_table_sql(req))


class RemoveBlobStorageUseCase:
    """Use-case: drop a blob table and all of its blobs."""

    def __init__(self, sql: SqlExecutor) -> None:
        self._sql = sql

    def execute(self, table: str) -> RawResult:
        return self._sql.exec_raw(f"DROP BLOB TABLE {table}")


class UploadBlobUseCase:
    """Use-case: store content under its SHA-1 key (``PUT``, 201 = created).

    The whole stream is uploaded from its start; it must be seekable so it can
    be hashed first and rewound for every failover attempt.
    """

    def __init__(self, executor: FailoverExecutor) -> None:
        self._executor = executor

    def execute(self, req: UploadBlobRequest) -> BlobResult:
        try:
            with _opened(req.source, "rb") as stream:
                return self._upload(req.table, stream)
        except OSError as exc:
            return BlobResult("", f"Could not read blob source: {exc}", BlobErrorType.OTHER)

    def _upload(self, table: str, stream: BinaryIO) -> BlobResult:
        key = sha1_key(stream)
        if key is None:
            return BlobResult("", "Could not compute SHA1 key.", BlobErrorType.OTHER)
        request = HttpRequest("PUT", blob_path(table, key), body=stream)
        return _transfer(
            self._executor,
            request,
            key,
            201,
            {409: f"Blob with the key '{key}' already exists."},
        )


class BlobExistsUseCase:
    """Use-case: check for a blob (``HEAD``, 200 = exists)."""

    def __init__(self, executor: FailoverExecutor) -> None:
        self._executor = executor

    def execute(self, req: BlobKeyRequest) -> BlobResult:
        request = HttpRequest("HEAD", blob_path(req.table, req.key))
        return _transfer(
            self._executor,
            request,
            req.key,
            200,
            {404: missing_blob_message(req.key)},
        )


class DownloadBlobUseCase:
    """Use-case: stream a blob into a binary sink or file (``GET``, 404 = not found)."""

    def __init__(self, executor: FailoverExecutor) -> None:
        self._executor = executor

    def execute(self, req: DownloadBlobRequest) -> BlobResult:
        try:
            with _opened(req.target, "wb") as sink:
                request = HttpRequest("GET", blob_path(req.table, req.key), sink=sink)
                return _transfer(
                    self._executor,
                    request,
                    req.key,
                    200,
                    {404: f"Blob with the key '{req.key}' was not found."},
                )
        except OSError as exc:
            return BlobResult(req.key, f"Could not write blob target: {exc}", BlobErrorType.OTHER)


class DeleteBlobUseCase:
    """Use-case: delete a blob (``DELETE``, 204 = deleted)."""

    def __init__(self, executor: FailoverExecutor) -> None:
        self._executor = executor

    def execute(self, req: BlobKeyRequest) -> BlobResult:
        request = HttpRequest("DELETE", blob_path(req.table, req.key))
        return _transfer(
            self._executor,
            request,
            req.key,
            204,
            {404: missing_blob_message(req.key)},
        )

