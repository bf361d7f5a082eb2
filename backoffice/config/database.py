from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from backoffice.utils.logger import Logger
from .settings import settings

logger = Logger(__name__)


class DatabaseManager:
    """MongoDB connection manager."""

    def __init__(self, uri: str | None = None, database_name: str | None = None):
        self._uri = uri or settings.mongodb_atlas_uri
        self._database_name = database_name or settings.database_name
        self._client: AsyncIOMotorClient | None = None
        self._database: AsyncIOMotorDatabase | None = None
        self._connected = False

    async def connect(self) -> None:
        if self._connected:
            return
        try:
            self._client = AsyncIOMotorClient(self._uri)
            self._database = self._client[self._database_name]
            await self._client.admin.command("ping")
            self._connected = True
            logger.info(f"Connected to MongoDB [{self._database_name}]")
        except Exception as e:
            self._connected = False
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._connected = False
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._database

    @property
    def is_connected(self) -> bool:
        return self._connected
