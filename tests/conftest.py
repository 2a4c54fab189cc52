import copy
import pytest
from types import SimpleNamespace

from src.tagger.storage.memory import MemoryStorage
from src.tagger.storage.json_file import JsonFileStorage
from src.tagger.storage.mongo import MongoStorage


# --- In-process stand-ins for pymongo's async collection API ---

def _matches(doc, query):
    return all(doc.get(key) == value for key, value in query.items())


def _sorted(docs, sort):
    result = list(docs)
    for key, direction in reversed(sort or []):
        result.sort(key=lambda d: d.get(key), reverse=direction < 0)
    return result


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return copy.deepcopy(next(self._iter))
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """Equality-only subset of AsyncCollection used by MongoStorage."""

    def __init__(self, name):
        self.name = name
        self.docs = []
        self.indexes = []

    async def create_index(self, keys, unique=False):
        self.indexes.append((keys, unique))
        return str(keys)

    async def find_one(self, query, projection=None, sort=None):
        for doc in _sorted(self.docs, sort):
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query, sort=None):
        return FakeCursor([d for d in _sorted(self.docs, sort) if _matches(d, query)])

    async def insert_one(self, doc):
        self.docs.append(copy.deepcopy(doc))

    async def insert_many(self, docs):
        for doc in docs:
            await self.insert_one(doc)

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            doc = dict(query)
            doc.update(update.get("$set", {}))
            doc.update(update.get("$setOnInsert", {}))
            self.docs.append(doc)
            return SimpleNamespace(matched_count=0, upserted_id=doc.get("_id"))
        return SimpleNamespace(matched_count=0, upserted_id=None)

    async def find_one_and_update(self, query, update, upsert=False, return_document=False):
        # Only $inc with ReturnDocument.AFTER is needed
        assert return_document
        for doc in self.docs:
            if _matches(doc, query):
                break
        else:
            if not upsert:
                return None
            doc = dict(query)
            self.docs.append(doc)
        for key, step in update["$inc"].items():
            doc[key] = doc.get(key, 0) + step
        return copy.deepcopy(doc)

    async def delete_one(self, query):
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, query)]
        return SimpleNamespace(deleted_count=before - len(self.docs))


class FakeMongoManager:
    def __init__(self):
        self.collections = {}
        self.initialized = False
        self.closed = False

    def init(self):
        self.initialized = True

    async def close(self):
        self.closed = True

    def get_collection(self, name):
        return self.collections.setdefault(name, FakeCollection(name))


@pytest.fixture
def mongo_manager():
    return FakeMongoManager()


@pytest.fixture(params=["memory", "json", "mongo"])
async def storage(request, tmp_path):
    """Every backend, initialized and empty."""
    if request.param == "memory":
        provider = MemoryStorage()
    elif request.param == "json":
        provider = JsonFileStorage(str(tmp_path / "tagger.db.json"))
    else:
        provider = MongoStorage(FakeMongoManager())

    async with provider:
        yield provider


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.json")
