"""
Generic MongoDB connection manager using Motor.

This module provides async MongoDB connectivity that works with any database.
Services receive the raw Motor database handle and work with plain dicts,
so the connection layer knows nothing about application schemas.

Example:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(
        uri="mongodb://localhost:27017",
        database_name="myapp",
    )
    entries = db.get_collection("diaryentries")
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

# Index spec: collection name -> list of (keys, options)
IndexSpec = Dict[str, List[Tuple[Sequence[Tuple[str, object]], dict]]]


class MongoDB:
    """Generic MongoDB connection manager - works with any database."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None
        self._initialized: bool = False

    async def connect(
        self,
        uri: str,
        database_name: str,
        indexes: Optional[IndexSpec] = None,
    ) -> None:
        """
        Connect to MongoDB and make sure the given indexes exist.

        Args:
            uri: MongoDB connection string
            database_name: Name of the database to use
            indexes: Optional mapping of collection name to index definitions
        """
        # Mask the URI for logging (hide credentials)
        masked_uri = uri.split("@")[-1] if "@" in uri else uri
        logger.info(f"Connecting to MongoDB: {masked_uri}")
        logger.debug(f"Database name: {database_name}")

        try:
            # tz_aware so datetimes read back compare cleanly with aware values
            self._client = AsyncIOMotorClient(uri, tz_aware=True)
            self._database_name = database_name

            if indexes:
                await self.ensure_indexes(indexes)

            self._initialized = True
            logger.info(f"Successfully connected to MongoDB database: {database_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def ensure_indexes(self, indexes: IndexSpec) -> None:
        """
        Create indexes declared by the application.

        Args:
            indexes: Mapping of collection name to (keys, options) pairs
        """
        for collection_name, definitions in indexes.items():
            collection = self.get_collection(collection_name)
            for keys, options in definitions:
                logger.debug(f"Ensuring index on {collection_name}: {list(keys)}")
                await collection.create_index(list(keys), **options)

    async def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
            self._client.close()
            self._client = None
            self._database_name = None
            self._initialized = False
            logger.debug("MongoDB connection closed")

    @property
    def is_connected(self) -> bool:
        """Check if database is connected and initialized."""
        return self._initialized

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        """Get the underlying Motor client."""
        return self._client

    @property
    def database_name(self) -> Optional[str]:
        """Get the current database name."""
        return self._database_name

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get the underlying Motor database instance."""
        if not self._client or not self._database_name:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]

    def get_collection(self, name: str):
        """
        Get a raw Motor collection for direct access.

        Args:
            name: Collection name

        Returns:
            AsyncIOMotorCollection instance
        """
        if not self._client or not self._database_name:
            logger.error("Attempted to get collection without database connection")
            raise RuntimeError("Database not connected")
        logger.debug(f"Getting collection: {name}")
        return self._client[self._database_name][name]

