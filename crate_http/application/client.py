"""
Client facade.

Connect to one or more nodes, then run SQL with ``exec`` (decoded ``Result``)
or ``exec_raw`` (undecoded ``RawResult``):

    client = Client()
    client.connect([Node("http://n1:4200"), Node("http://n2:4200")])
    client.default_schema = "doc"
    result = client.exec(Query("select name from t where id = ?", "[1]"))
    if result:
        names = [rec.value("name").as_string() for rec in result.records()]
    else:
        print(result.error_string)

None of the operations raise for transport, server or decode errors; failures
are carried by the returned result objects.
"""
from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple, Union

from .dto import (
    BlobKeyRequest,
    BlobSource,
    CreateBlobStorageRequest,
    DownloadBlobRequest,
    RefreshRequest,
    UploadBlobRequest,
)
from .executor import FailoverExecutor
from .request_builder import build_sql_request
from .use_cases.blob_storage import (
    BlobExistsUseCase,
    CreateBlobStorageUseCase,
    DeleteBlobUseCase,
    DownloadBlobUseCase,
    RemoveBlobStorageUseCase,
    UploadBlobUseCase,
)
from .use_cases.cluster_info import ClusterNodesUseCase, ListSchemataUseCase, RefreshTableUseCase
from ..domain.blob import BlobResult
from ..domain.interfaces import HttpTransport, SqlExecutor
from ..domain.models import ConnectionPolicy, Node, Query
from ..domain.raw_result import RawResult
from ..domain.result import Result
from ..infrastructure import config
from ..infrastructure.http.transport import RequestsTransport

ConnectTarget = Union[str, Node, Sequence[Node]]


class Client(SqlExecutor):
    """Stateless-per-call client over a connection descriptor (nodes + default schema)."""

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        policy: ConnectionPolicy = ConnectionPolicy.STICKY_LAST_SUCCESSFUL,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._transport = transport or RequestsTransport()
        self._executor = FailoverExecutor(self._transport, policy, rng)
        self._default_schema: Optional[str] = None

    @classmethod
    def from_env(cls, transport: Optional[HttpTransport] = None) -> "Client":
        """Client connected to the nodes, credentials and schema configured in the environment."""
        client = cls(transport, config.connection_policy())
        client.connect(config.configured_nodes())
        client.default_schema = config.default_schema()
        return client

    # --- connection ---
    def connect(self, target: ConnectTarget, policy: Optional[ConnectionPolicy] = None) -> bool:
        """Use ``target`` (url, node, or ordered nodes) for all following requests."""
        if isinstance(target, str):
            nodes: List[Node] = [Node(target)]
        elif isinstance(target, Node):
            nodes = [target]
        else:
            nodes = list(target)
        return self._executor.connect(nodes, policy)

    def disconnect(self) -> None:
        self._executor.disconnect()

    def is_connected(self) -> bool:
        return self._executor.is_connected

    def __bool__(self) -> bool:
        return self.is_connected()

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._executor.nodes

    @property
    def executor(self) -> FailoverExecutor:
        return self._executor

    @property
    def default_schema(self) -> Optional[str]:
        return self._default_schema

    @default_schema.setter
    def default_schema(self, schema: Optional[str]) -> None:
        self._default_schema = schema or None

    def clear_default_schema(self) -> None:
        self._default_schema = None

    # --- SQL ---
    def exec(self, query: Union[str, Query]) -> Result:
        return Result(self.exec_raw(query))

    def exec_raw(self, query: Union[str, Query]) -> RawResult:
        if isinstance(query, str):
            query = Query(query)
        return self._executor.execute(build_sql_request(query, self._default_schema))

    def refresh(self, table: str) -> bool:
        return RefreshTableUseCase(self).execute(RefreshRequest(table))

    def schemata(self) -> List[str]:
        return ListSchemataUseCase(self).execute()

    def cluster_nodes(self) -> List[Node]:
        return ClusterNodesUseCase(self).execute()

    # --- blobs ---
    def create_blob_storage(self, table: str, shards: int = -1, replicas: int = -1, path: str = "") -> RawResult:
        return CreateBlobStorageUseCase(self).execute(CreateBlobStorageRequest(table, shards, replicas, path))

    def remove_blob_storage(self, table: str) -> RawResult:
        return RemoveBlobStorageUseCase(self).execute(table)

    def upload_blob(self, table: str, source: BlobSource) -> BlobResult:
        return UploadBlobUseCase(self._executor).execute(UploadBlobRequest(table, source))

    def exists_blob(self, table: str, key: str) -> BlobResult:
        return BlobExistsUseCase(self._executor).execute(BlobKeyRequest(table, key))

    def download_blob(self, table: str, key: str, target: BlobSource) -> BlobResult:
        return DownloadBlobUseCase(self._executor).execute(DownloadBlobRequest(table, key, target))

    def delete_blob(self, table: str, key: str) -> BlobResult:
        return DeleteBlobUseCase(self._executor).execute(BlobKeyRequest(table, key))

    # --- resources ---
    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
