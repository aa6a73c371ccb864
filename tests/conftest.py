import copy
from types import SimpleNamespace

import pytest

from services.store import FinanceStore


def _lookup(doc, path):
    current = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


def _container(doc, path, create):
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            if not create:
                return None, parts[-1]
            current[part] = {}
        current = current[part]
    return current, parts[-1]


class FakeCollection:
    """In-memory stand-in for the subset of the motor collection API the store uses."""

    def __init__(self, name):
        self.name = name
        self.docs = []

    def _matches(self, doc, query):
        for key, expected in query.items():
            found, value = _lookup(doc, key)
            if isinstance(expected, dict) and "$exists" in expected:
                if found != expected["$exists"]:
                    return False
            elif not found or value != expected:
                return False
        return True

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def update_one(self, query, update, upsert=False):
        doc = next((d for d in self.docs if self._matches(d, query)), None)
        matched = 1 if doc is not None else 0
        if doc is None:
            if not upsert:
                return SimpleNamespace(matched_count=0, modified_count=0, acknowledged=True, upserted_id=None)
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            self.docs.append(doc)

        before = copy.deepcopy(doc)
        for path, value in update.get("$set", {}).items():
            parent, key = _container(doc, path, True)
            parent[key] = copy.deepcopy(value)
        for path, operand in update.get("$push", {}).items():
            parent, key = _container(doc, path, True)
            items = operand["$each"] if isinstance(operand, dict) and "$each" in operand else [operand]
            parent.setdefault(key, []).extend(copy.deepcopy(items))
        for path, match in update.get("$pull", {}).items():
            parent, key = _container(doc, path, False)
            if parent is not None and isinstance(parent.get(key), list):
                parent[key] = [i for i in parent[key] if not all(i.get(k) == v for k, v in match.items())]
        for path in update.get("$unset", {}):
            parent, key = _container(doc, path, False)
            if parent is not None:
                parent.pop(key, None)

        return SimpleNamespace(
            matched_count=matched,
            modified_count=int(matched and doc != before),
            acknowledged=True,
            upserted_id=None if matched else "upserted",
        )


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection(name))


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def store(db):
    return FinanceStore(db)


@pytest.fixture
def user_id():
    return "user-1"


class FakeAssistant:
    """Scripted LLM collaborator recording every call it receives."""

    def __init__(self, intents=None, classification=None):
        self.intents = intents if intents is not None else []
        self.classification = classification
        self.single_calls = []
        self.multi_calls = []

    async def resolve_intents(self, message, today=None):
        return copy.deepcopy(self.intents)

    async def phrase_single(self, question, data):
        self.single_calls.append((question, data))
        return "single reply"

    async def phrase_multi(self, question, results):
        self.multi_calls.append((question, results))
        return "multi reply"

    async def classify_receipt(self, text):
        return copy.deepcopy(self.classification)


class FakeShopping:
    """Shopping client returning a fixed, already parsed listing."""

    def __init__(self, products):
        self._products = products
        self.calls = []

    async def products(self, query, country, stores=None):
        self.calls.append((query, country))
        return copy.deepcopy(self._products)
