import logging
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from .paths import CollectionPath
from .pydantic_compat import BaseModel, ConfigDict, PydanticVersion, get_model_config

if TYPE_CHECKING:
    from .firestore_client import FirestoreDB

logger = logging.getLogger(__name__)


class SnapshotData(BaseModel):
    """
    Base class for document content.

    A subclass describes the payload of one kind of document. It is decoded
    from and encoded to the store's raw field map through pydantic, and
    knows which :class:`FirestoreDB` its paths resolve against.
    """

    # --------------------------------------------------------------------------
    # Class attribute for injected FirestoreDB instance
    # --------------------------------------------------------------------------
    _db: ClassVar[Optional["FirestoreDB"]] = None  # Injected externally

    # --------------------------------------------------------------------------
    # Collection definition
    # --------------------------------------------------------------------------
    class Settings:
        name: str = "BaseCollection"  # Override in subclasses

    # --------------------------------------------------------------------------
    # Pydantic configuration
    # --------------------------------------------------------------------------
    if PydanticVersion >= 2:
        model_config = ConfigDict(**get_model_config())
    else:
        class Config:
            allow_population_by_field_name = True

    # --------------------------------------------------------------------------
    # Database initialization methods (injection)
    # --------------------------------------------------------------------------
    @classmethod
    def initialize_db(cls, db: "FirestoreDB") -> None:
        """
        Inject the FirestoreDB instance used to resolve this model's paths.
        """
        cls._db = db
        logger.debug(f"{cls.__name__} bound to Firestore project {db.project_id}")

    @classmethod
    def get_db(cls) -> "FirestoreDB":
        if not cls._db:
            raise RuntimeError("Database must be initialized before using the model.")
        return cls._db

    @classmethod
    def get_collection_name(cls) -> str:
        """
        Class-level method to get the collection name.
        """
        if hasattr(cls, "Settings") and hasattr(cls.Settings, "name"):
            return cls.Settings.name
        return cls.__name__

    @classmethod
    def collection_path(cls) -> CollectionPath:
        """Top-level collection path for this model, taken from ``Settings.name``."""
        return CollectionPath(cls.get_collection_name(), cls)


class HasTimestamps:
    """
    Opt-in mixin for models whose documents track store-assigned timestamps.

    The store adapter writes ``SnapshotTimestampKey.CREATE_TIME`` and
    ``SnapshotTimestampKey.UPDATE_TIME`` into the payload; snapshots loaded
    from the store expose them as ``create_time`` / ``update_time``.
    """


def has_timestamps(model: Any) -> bool:
    """Return True if ``model`` (a class or an instance) opts into timestamps."""
    if isinstance(model, type):
        return issubclass(model, HasTimestamps)
    return isinstance(model, HasTimestamps)
