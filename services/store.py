"""MongoDB adapter for the per-user finance documents.

Every collection holds one document per user (or per user/month/entry for
reassignments) and all writes go through single-document atomic updates on
dot-delimited nested paths such as ``"2024-05.03.entries"``.
"""
import logging
from typing import Any, Dict, Iterable, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from services.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

ENTRIES_COLLECTION = "user_entries"
BUDGETS_COLLECTION = "user_budgets"
INCOME_COLLECTION = "user_income"
REASSIGNMENTS_COLLECTION = "budget_reassignments"


class UserCollection:
    """Thin wrapper keying every query on ``user_id`` (plus optional extra keys)."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection
        self.name = collection.name

    @staticmethod
    def _filter(user_id: str, require: Optional[str] = None, **keys: Any) -> Dict[str, Any]:
        query: Dict[str, Any] = {"user_id": user_id, **keys}
        if require:
            query[require] = {"$exists": True}
        return query

    async def find_one(self, user_id: str, *paths: str, **keys: Any) -> Optional[Dict[str, Any]]:
        """Returns the user's document, projected onto ``paths`` when given."""
        projection = {path: 1 for path in paths} if paths else None
        if projection is not None:
            projection["_id"] = 0
        try:
            return await self.collection.find_one(self._filter(user_id, **keys), projection)
        except PyMongoError as e:
            logger.error(f"Database error reading '{self.name}' for user {user_id}: {e}")
            raise CollaboratorFailure(f"Database error reading {self.name}: {e}")

    async def _update(self, query: Dict[str, Any], update: Dict[str, Any], upsert: bool):
        try:
            result = await self.collection.update_one(query, update, upsert=upsert)
        except PyMongoError as e:
            logger.error(f"Database error updating '{self.name}': {e}")
            raise CollaboratorFailure(f"Database error updating {self.name}: {e}")
        logger.debug(
            f"update_one on '{self.name}' matched={result.matched_count} modified={result.modified_count}"
        )
        return result

    async def set(self, user_id: str, fields: Dict[str, Any], upsert: bool = True,
                  require: Optional[str] = None, **keys: Any):
        return await self._update(self._filter(user_id, require, **keys), {"$set": fields}, upsert)

    async def push(self, user_id: str, path: str, items: Iterable[Dict[str, Any]], upsert: bool = True):
        return await self._update(self._filter(user_id), {"$push": {path: {"$each": list(items)}}}, upsert)

    async def pull(self, user_id: str, path: str, match: Dict[str, Any]):
        return await self._update(self._filter(user_id), {"$pull": {path: match}}, False)

    async def unset(self, user_id: str, *paths: str, require: Optional[str] = None):
        return await self._update(self._filter(user_id, require), {"$unset": {p: "" for p in paths}}, False)


class FinanceStore:
    """Connected handle passed explicitly to every service function."""

    def __init__(self, db: AsyncIOMotorDatabase, client: Optional[AsyncIOMotorClient] = None):
        self.client = client
        self.db = db
        self.entries = UserCollection(db[ENTRIES_COLLECTION])
        self.budgets = UserCollection(db[BUDGETS_COLLECTION])
        self.income = UserCollection(db[INCOME_COLLECTION])
        self.reassignments = UserCollection(db[REASSIGNMENTS_COLLECTION])

    @classmethod
    async def connect(cls, uri: str, db_name: str) -> "FinanceStore":
        logger.info(f"Connecting to MongoDB at {uri}...")
        client = AsyncIOMotorClient(uri)
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise CollaboratorFailure(f"MongoDB ping failed: {e}")
        logger.info(f"Successfully connected to MongoDB database: {db_name}")
        return cls(client[db_name], client)

    def close(self) -> None:
        if self.client is not None:
            logger.info("Closing MongoDB connection...")
            self.client.close()
