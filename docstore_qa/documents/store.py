"""Source document store interface and MongoDB implementation."""

from abc import ABC, abstractmethod
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from docstore_qa.config import MongoSettings, get_settings
from docstore_qa.exceptions import DocumentStoreError, ErrorCode
from docstore_qa.logging_config import get_logger

logger = get_logger(__name__)


class DocumentStore(ABC):
    """Abstract base class for the store whose contents are answered over.

    The QA pipeline only reads from it.
    """

    system_prefix: str = "system."

    def is_system_collection(self, name: str) -> bool:
        """Whether a collection is reserved and must never be indexed."""
        return name.startswith(self.system_prefix)

    async def ping(self) -> bool:
        """Check that the store answers."""
        try:
            await self.list_collection_names()
        except DocumentStoreError as e:
            logger.warning(f"Document store unreachable: {e}")
            return False
        return True

    @abstractmethod
    async def list_collection_names(self) -> list[str]:
        """List collection names, excluding reserved system collections.

        Raises:
            DocumentStoreError: If the store cannot be queried.
        """
        ...

    @abstractmethod
    async def find_all(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every record of a collection in natural order.

        Raises:
            DocumentStoreError: If the store cannot be queried.
        """
        ...

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Count the records of a collection.

        Raises:
            DocumentStoreError: If the store cannot be queried.
        """
        ...


class MongoDocumentStore(DocumentStore):
    """MongoDB document store using the asynchronous PyMongo client."""

    def __init__(
        self,
        settings: MongoSettings | None = None,
        client: AsyncMongoClient | None = None,
    ) -> None:
        """Initialize the MongoDB document store.

        Args:
            settings: MongoDB configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().mongo
        self._client = client
        self._owns_client = client is None
        self.system_prefix = self._settings.system_prefix

    def _get_client(self) -> AsyncMongoClient:
        """Get or create MongoDB client."""
        if self._client is None:
            self._client = AsyncMongoClient(self._settings.uri.get_secret_value())
        return self._client

    def _database(self) -> Any:
        return self._get_client()[self._settings.database]

    @property
    def database_name(self) -> str:
        return self._settings.database

    async def close(self) -> None:
        """Close the MongoDB client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """Check that the server answers."""
        try:
            await self._get_client().admin.command("ping")
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    async def list_collection_names(self) -> list[str]:
        """List user collections of the configured database."""
        try:
            names = await self._database().list_collection_names()
        except PyMongoError as e:
            raise DocumentStoreError(
                f"Failed to list collections: {e}",
                code=ErrorCode.DOCUMENT_STORE_ERROR,
                details={"database": self._settings.database, "error": str(e)},
            ) from e

        return [name for name in names if not self.is_system_collection(name)]

    async def find_all(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every record of a collection."""
        try:
            cursor = self._database()[collection].find({})
            return await cursor.to_list(None)
        except PyMongoError as e:
            raise DocumentStoreError(
                f"Failed to read collection: {e}",
                code=ErrorCode.DOCUMENT_STORE_ERROR,
                details={"collection": collection, "error": str(e)},
            ) from e

    async def count(self, collection: str) -> int:
        """Count documents in a collection."""
        try:
            return await self._database()[collection].count_documents({})
        except PyMongoError as e:
            raise DocumentStoreError(
                f"Failed to count collection: {e}",
                code=ErrorCode.DOCUMENT_STORE_ERROR,
                details={"collection": collection, "error": str(e)},
            ) from e
