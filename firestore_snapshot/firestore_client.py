import os
import logging
from typing import Any, AsyncGenerator, Iterable, List, Optional, Tuple, Type, Union

from google.cloud.firestore_v1 import SERVER_TIMESTAMP, AsyncClient

from .codec import encode
from .enums import SnapshotTimestampKey
from .exceptions import DocumentNotFoundError
from .firestore_fields import FieldAccessor, accessor_attribute
from .firestore_model import has_timestamps
from .paths import CollectionPath, DocumentPath
from .pydantic_compat import get_field_alias, get_model_fields
from .query_builder import QueryBuilder
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

QuerySource = Union[CollectionPath, QueryBuilder]


class FirestoreDB:
    """
    Helper wrapper that encapsulates the creation of a Firestore
    :class:`google.cloud.firestore_v1.AsyncClient` and performs the
    document I/O for :class:`Snapshot` objects.

    The same object can transparently connect to:

    * **A local Firestore emulator** – useful for local development and CI.
    * **The real Firestore backend** – default when no emulator host is set.
    * **A mocked client** – handy for unit‐tests that must not touch the network.

    Snapshots and query builders never talk to Firestore themselves; every
    read and write goes through one of the ``async`` methods below.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        database: Optional[str] = None,
        credentials=None,
        emulator_host: Optional[str] = None,
    ):
        """
        Parameters
        ----------
        project_id :
            Google Cloud project identifier (e.g. ``"my‐gcp‐project"``).
            When *None*, the project is inferred from the credentials.
        database :
            Optional Firestore **database ID** (defaults to the default database).
        credentials :
            Explicit credentials object; if *None*, the Google SDK default
            credentials chain is used.
        emulator_host :
            Hostname (and port) of a running **Firestore emulator**
            such as ``"localhost:8080"``.  When provided, the client points
            to the emulator instead of the production service.
        """
        self.project_id = project_id
        self.database = database
        self.credentials = credentials
        self._emulator_host = emulator_host

        self.client: AsyncClient = self._init_client()

    @classmethod
    def from_env(cls, credentials=None) -> "FirestoreDB":
        """
        Build an instance from ``GOOGLE_CLOUD_PROJECT``, ``DATABASE`` and
        ``FIRESTORE_EMULATOR_HOST``. Empty variables count as unset.
        """
        return cls(
            project_id=os.environ.get("GOOGLE_CLOUD_PROJECT") or None,
            database=os.environ.get("DATABASE") or None,
            credentials=credentials,
            emulator_host=os.environ.get("FIRESTORE_EMULATOR_HOST", "").strip() or None,
        )

    # --------------------------------------------------------------------- #
    # Internal helpers                                                      #
    # --------------------------------------------------------------------- #

    def _init_client(self) -> AsyncClient:
        """
        Instantiate and return an :class:`AsyncClient`.

        * If ``self._emulator_host`` is set, the mandatory
          ``FIRESTORE_EMULATOR_HOST`` environment variable is exported so that
          the Google client libraries route all traffic to the local emulator.
        * Otherwise, any previously set ``FIRESTORE_EMULATOR_HOST`` variable is
          removed to make sure we hit the real Firestore backend.
        """
        if self._emulator_host:
            os.environ["FIRESTORE_EMULATOR_HOST"] = self._emulator_host
            logger.info(f"Using Firestore emulator on {self._emulator_host}")
        else:
            os.environ.pop("FIRESTORE_EMULATOR_HOST", None)
        return AsyncClient(
            project=self.project_id,
            database=self.database,
            credentials=self.credentials,
        )

    def _query_source(self, source: QuerySource) -> Tuple[Type[Any], Any]:
        if isinstance(source, QueryBuilder):
            return source.model, source.generate()
        if isinstance(source, CollectionPath):
            return source.model, source.collection_reference(self)
        raise TypeError(f"Expected a CollectionPath or QueryBuilder, got {type(source).__name__}")

    @staticmethod
    def _payload_key(model: Type[Any], accessor: FieldAccessor) -> str:
        attribute = accessor_attribute(accessor)
        if attribute not in get_model_fields(model):
            raise ValueError(f"{model.__name__} has no field {accessor!r}.")
        return get_field_alias(model, attribute)

    # --------------------------------------------------------------------- #
    # Public utility methods                                                #
    # --------------------------------------------------------------------- #

    def use_emulator(self, host: str = "localhost:8080"):
        """
        Switch the instance to a **local emulator** and recreate the client.

        Call this at runtime if you need to toggle from production to emulator,
        for example in integration tests.

        Parameters
        ----------
        host :
            Target host and port where the emulator is listening.
        """
        self._emulator_host = host
        self.client = self._init_client()
        logger.info(f"Emulator enabled on {host}")

    def clear_emulator(self):
        """
        Disable the emulator and reconnect to the **production** Firestore
        endpoint.  A fresh :class:`AsyncClient` is created automatically.
        """
        self._emulator_host = None
        self.client = self._init_client()
        logger.info("Emulator disabled – using real Firestore.")

    def mock_firestore_for_tests(self):
        """
        Replace the underlying client with a :class:`unittest.mock.MagicMock`.

        This is the quickest way to isolate unit tests from Firestore without
        having to spin up the emulator or touch the network.
        """
        from unittest.mock import MagicMock

        self.client = MagicMock()
        logger.info("Firestore client replaced with MagicMock for unit tests.")

    # --------------------------------------------------------------------- #
    # Reads                                                                 #
    # --------------------------------------------------------------------- #

    async def get(self, path: DocumentPath) -> Snapshot:
        """
        Fetch the document at ``path``.

        Raises :class:`DocumentNotFoundError` if it does not exist or does
        not decode into ``path.model``.
        """
        document = await path.document_reference(self).get()
        logger.debug(f"Get: {path.path} exists={document.exists}")
        return Snapshot.from_document(document, path.model)

    async def stream(self, source: QuerySource) -> AsyncGenerator[Snapshot, None]:
        """
        Yield a snapshot for every document of a collection or query.

        Documents that do not decode into the model are skipped with a warning.
        """
        model, query = self._query_source(source)
        async for document in query.stream():
            try:
                snapshot = Snapshot.from_document(document, model)
            except DocumentNotFoundError as exc:
                logger.warning(f"Skipping {exc.path}: not decodable as {model.__name__}")
                continue
            yield snapshot

    async def get_all(self, source: QuerySource) -> List[Snapshot]:
        return [snapshot async for snapshot in self.stream(source)]

    # --------------------------------------------------------------------- #
    # Writes                                                                #
    # --------------------------------------------------------------------- #

    async def create(self, snapshot: Snapshot) -> Snapshot:
        """
        Create the document; fails in Firestore if it already exists.
        """
        payload = encode(snapshot.data)
        if has_timestamps(snapshot.data):
            payload[SnapshotTimestampKey.CREATE_TIME.value] = SERVER_TIMESTAMP
            payload[SnapshotTimestampKey.UPDATE_TIME.value] = SERVER_TIMESTAMP

        logger.debug(f"Create: {snapshot.reference.path}")
        await snapshot.reference.create(payload)
        return snapshot

    async def set(self, snapshot: Snapshot, merge: bool = False) -> Snapshot:
        """
        Overwrite (or, with ``merge``, merge into) the document.

        A full overwrite keeps the creation time known to the snapshot and
        falls back to the server time for snapshots that were never loaded.
        """
        payload = encode(snapshot.data)
        if has_timestamps(snapshot.data):
            if not merge:
                payload[SnapshotTimestampKey.CREATE_TIME.value] = snapshot.create_time or SERVER_TIMESTAMP
            payload[SnapshotTimestampKey.UPDATE_TIME.value] = SERVER_TIMESTAMP

        logger.debug(f"Set: {snapshot.reference.path} merge={merge}")
        await snapshot.reference.set(payload, merge=merge)
        return snapshot

    async def update(self, snapshot: Snapshot, fields: Optional[Iterable[FieldAccessor]] = None) -> Snapshot:
        """
        Update an existing document with the snapshot's data, restricted to
        ``fields`` (accessors or attribute names) when given.
        """
        payload = encode(snapshot.data)
        if fields is not None:
            model = type(snapshot.data)
            keys = [self._payload_key(model, field) for field in fields]
            payload = {key: payload[key] for key in keys}
        if has_timestamps(snapshot.data):
            payload[SnapshotTimestampKey.UPDATE_TIME.value] = SERVER_TIMESTAMP

        logger.debug(f"Update: {snapshot.reference.path}, updates={payload}")
        await snapshot.reference.update(payload)
        return snapshot

    async def delete(self, target: Union[Snapshot, DocumentPath]) -> None:
        if isinstance(target, Snapshot):
            reference = target.reference
        else:
            reference = target.document_reference(self)
        logger.debug(f"Delete: {reference.path}")
        await reference.delete()
