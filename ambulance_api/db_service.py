"""Document storage for ambulances, backed by MongoDB."""

from __future__ import annotations

import dataclasses
import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, TypeVar
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT")

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 27017
DEFAULT_DATABASE = "andel-project-q"
DEFAULT_COLLECTION = "ambulance"
DEFAULT_TIMEOUT_SECONDS = 10.0
CONNECT_TIMEOUT_MS = 10_000


class DbServiceError(Exception):
    """Base class for storage errors."""


class DocumentNotFoundError(DbServiceError):
    """No document with the requested id exists."""

    def __init__(self, message: str = "document not found") -> None:
        super().__init__(message)


class DocumentConflictError(DbServiceError):
    """A document with the requested id already exists."""

    def __init__(self, message: str = "conflict: document already exists") -> None:
        super().__init__(message)


class DbService(ABC, Generic[DocT]):
    """Storage of documents keyed by their id."""

    @abstractmethod
    def create_document(self, document_id: str, document: DocT) -> None:
        """Store a new document; raise DocumentConflictError if the id is taken."""

    @abstractmethod
    def find_document(self, document_id: str) -> DocT:
        """Return the document; raise DocumentNotFoundError if absent."""

    @abstractmethod
    def update_document(self, document_id: str, document: DocT) -> None:
        """Replace the document; raise DocumentNotFoundError if absent."""

    @abstractmethod
    def delete_document(self, document_id: str) -> None:
        """Remove the document; raise DocumentNotFoundError if absent."""

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection, if any."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()


@dataclass(frozen=True)
class MongoServiceConfig:
    """Connection settings; empty or zero values are filled from the environment."""

    server_host: str = ""
    server_port: int = 0
    user_name: str = ""
    password: str = ""
    db_name: str = ""
    collection: str = ""
    timeout: float = 0.0

    def uri(self) -> str:
        """Return the connection URI, with credentials when a user is set."""
        address = f"{self.server_host}:{self.server_port}"
        if self.user_name:
            credentials = f"{quote_plus(self.user_name)}:{quote_plus(self.password)}"
            return f"mongodb://{credentials}@{address}"
        return f"mongodb://{address}"


def _parse_int(text: str, what: str, default: int) -> int:
    try:
        return int(text.strip())
    except ValueError:
        logger.warning("Invalid %s value: %s", what, text)
        return default


def resolve_config(
    config: MongoServiceConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> MongoServiceConfig:
    """Fill unset settings from AMBULANCE_API_MONGODB_* variables or defaults."""
    config = config or MongoServiceConfig()
    env = os.environ if environ is None else environ
    changes: dict[str, Any] = {}

    if not config.server_host:
        changes["server_host"] = env.get("AMBULANCE_API_MONGODB_HOST", DEFAULT_HOST)
    if config.server_port == 0:
        changes["server_port"] = _parse_int(
            env.get("AMBULANCE_API_MONGODB_PORT", str(DEFAULT_PORT)), "port", DEFAULT_PORT
        )
    if not config.user_name:
        changes["user_name"] = env.get("AMBULANCE_API_MONGODB_USERNAME", "")
    if not config.password:
        changes["password"] = env.get("AMBULANCE_API_MONGODB_PASSWORD", "")
    if not config.db_name:
        changes["db_name"] = env.get("AMBULANCE_API_MONGODB_DATABASE", DEFAULT_DATABASE)
    if not config.collection:
        changes["collection"] = env.get("AMBULANCE_API_MONGODB_COLLECTION", DEFAULT_COLLECTION)
    if config.timeout == 0:
        changes["timeout"] = float(
            _parse_int(
                env.get("AMBULANCE_API_MONGODB_TIMEOUT_SECONDS", "10"),
                "timeout",
                int(DEFAULT_TIMEOUT_SECONDS),
            )
        )
    return dataclasses.replace(config, **changes)


def _default_client_factory(uri: str, **options: Any) -> Any:
    from pymongo import MongoClient

    return MongoClient(uri, **options)


class MongoService(DbService[DocT]):
    """DbService storing documents in a MongoDB collection, matched on their "id" key.

    ``document_type`` must offer ``from_dict`` and ``to_dict``; without it plain
    dicts are stored and returned. The client is created lazily on first use.
    """

    def __init__(
        self,
        config: MongoServiceConfig | None = None,
        document_type: Any = None,
        client_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.config = resolve_config(config)
        self._document_type = document_type
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None
        self._lock = threading.Lock()
        logger.info(
            "MongoDB config: //%s@%s:%s/%s/%s",
            self.config.user_name,
            self.config.server_host,
            self.config.server_port,
            self.config.db_name,
            self.config.collection,
        )

    def _connect(self) -> Any:
        client = self._client
        if client is not None:
            return client
        with self._lock:
            if self._client is None:
                logger.info(
                    "Using URI: mongodb://%s:%s",
                    self.config.server_host,
                    self.config.server_port,
                )
                self._client = self._client_factory(
                    self.config.uri(),
                    connectTimeoutMS=CONNECT_TIMEOUT_MS,
                    timeoutMS=int(self.config.timeout * 1000),
                )
            return self._client

    def _collection(self) -> Any:
        return self._connect()[self.config.db_name][self.config.collection]

    def _encode(self, document: Any) -> dict[str, Any]:
        if self._document_type is None:
            return dict(document)
        return document.to_dict()

    def _decode(self, raw: Mapping[str, Any]) -> Any:
        data = {key: value for key, value in raw.items() if key != "_id"}
        if self._document_type is None:
            return data
        return self._document_type.from_dict(data)

    def _require_existing(self, collection: Any, document_id: str) -> Mapping[str, Any]:
        found = collection.find_one({"id": document_id})
        if found is None:
            raise DocumentNotFoundError()
        return found

    def create_document(self, document_id: str, document: DocT) -> None:
        collection = self._collection()
        if collection.find_one({"id": document_id}) is not None:
            raise DocumentConflictError()
        collection.insert_one(self._encode(document))

    def find_document(self, document_id: str) -> DocT:
        collection = self._collection()
        return self._decode(self._require_existing(collection, document_id))

    def update_document(self, document_id: str, document: DocT) -> None:
        collection = self._collection()
        self._require_existing(collection, document_id)
        collection.replace_one({"id": document_id}, self._encode(document))

    def delete_document(self, document_id: str) -> None:
        collection = self._collection()
        self._require_existing(collection, document_id)
        collection.delete_one({"id": document_id})

    def disconnect(self) -> None:
        if self._client is None:
            return
        with self._lock:
            client, self._client = self._client, None
            if client is not None:
                client.close()