# database.py
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError
from bson import ObjectId
from datetime import datetime, timezone
from typing import List, Optional
import logging

from models.student import Student, validate_student_fields

logger = logging.getLogger(__name__)

# Newest first; ObjectIds break ties between records created in the same instant.
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def utc_now() -> datetime:
    """Current UTC time at the millisecond precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class StudentStore:
    """CRUD access to the ``students`` collection.

    Every write runs the student field constraints, so nothing invalid is
    persisted even when a caller skips its own validation.
    """

    def __init__(self, collection):
        self.collection = collection

    async def create(self, fields: dict) -> Student:
        student_dict = validate_student_fields(fields)
        now = utc_now()
        student_dict["createdAt"] = now
        student_dict["updatedAt"] = now
        result = await self.collection.insert_one(student_dict)
        student_dict["_id"] = result.inserted_id
        logger.info(f"Created student {result.inserted_id}")
        return Student.from_document(student_dict)

    async def find(self, sort=NEWEST_FIRST, limit: int = 10, skip: int = 0) -> List[Student]:
        cursor = self.collection.find({}).sort(sort).skip(skip).limit(limit)
        students = await cursor.to_list(None)
        return [Student.from_document(s) for s in students]

    async def count(self) -> int:
        return await self.collection.count_documents({})

    async def find_by_id(self, id: str) -> Optional[Student]:
        student = await self.collection.find_one({"_id": ObjectId(id)})
        return Student.from_document(student) if student else None

    async def update_by_id(self, id: str, fields: dict) -> Optional[Student]:
        update_data = validate_student_fields(fields, partial=True)
        update_data["updatedAt"] = utc_now()
        student = await self.collection.find_one_and_update(
            {"_id": ObjectId(id)},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if not student:
            return None
        logger.info(f"Updated student {id}: {sorted(k for k in update_data if k != 'updatedAt')}")
        return Student.from_document(student)

    async def delete_by_id(self, id: str) -> Optional[Student]:
        student = await self.collection.find_one_and_delete({"_id": ObjectId(id)})
        if not student:
            return None
        logger.info(f"Deleted student {id}")
        return Student.from_document(student)


class Database:
    """Explicit MongoDB handle, connected once at startup and closed on shutdown."""

    def __init__(self, uri: str, name: str):
        self.uri = uri
        self.name = name
        self.client = None
        self.db = None

    async def connect(self):
        self.client = AsyncIOMotorClient(self.uri, serverSelectionTimeoutMS=5000, tz_aware=True)
        try:
            await self.client.admin.command("ping")
            self.db = self.client[self.name]
            await self.db.students.create_index([("createdAt", DESCENDING)])
        except PyMongoError as e:
            logger.error(f"MongoDB connection error: {str(e)}")
            self.client.close()
            self.client = None
            self.db = None
            raise
        logger.info(f"MongoDB connected to database: {self.name}")

    async def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None

    @property
    def students(self) -> StudentStore:
        if self.db is None:
            raise RuntimeError("Database is not connected")
        return StudentStore(self.db.students)
