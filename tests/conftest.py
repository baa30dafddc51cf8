import copy

import bson
import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from fastapi.testclient import TestClient

from database import StudentStore
from main import create_app
from routes.students import get_student_store


def bson_roundtrip(document):
    """Store documents the way MongoDB does: millisecond dates, UTC-aware on read."""
    return bson.decode(bson.encode(document), codec_options=CodecOptions(tz_aware=True))


class InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list, direction=None):
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        for key, order in reversed(keys):
            self.documents.sort(key=lambda d: d[key], reverse=order < 0)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        end = self._skip + self._limit if self._limit else None
        return [copy.deepcopy(d) for d in self.documents[self._skip:end]]


class FakeCollection:
    """In-memory stand-in for the motor collection calls StudentStore makes."""

    def __init__(self):
        self.documents = {}
        self.calls = []
        self.indexes = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append(keys)

    async def insert_one(self, document):
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = bson_roundtrip(document)
        return InsertResult(document["_id"])

    def find(self, filter=None):
        self.calls.append("find")
        return FakeCursor(list(self.documents.values()))

    async def count_documents(self, filter):
        self.calls.append("count_documents")
        return len(self.documents)

    async def find_one(self, filter):
        self.calls.append("find_one")
        document = self.documents.get(filter["_id"])
        return copy.deepcopy(document) if document else None

    async def find_one_and_update(self, filter, update, return_document=None):
        self.calls.append("find_one_and_update")
        document = self.documents.get(filter["_id"])
        if document is None:
            return None
        document.update(update["$set"])
        self.documents[filter["_id"]] = document = bson_roundtrip(document)
        return copy.deepcopy(document)

    async def find_one_and_delete(self, filter):
        self.calls.append("find_one_and_delete")
        document = self.documents.pop(filter["_id"], None)
        return copy.deepcopy(document) if document else None


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def store(collection):
    return StudentStore(collection)


@pytest.fixture
def app(store):
    app = create_app()
    app.dependency_overrides[get_student_store] = lambda: store
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
