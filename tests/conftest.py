import copy
from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError

from chatroom.app import create_app
from chatroom.config import Settings
from chatroom.store import ChatStore


def matches(doc, query):
    for key, cond in query.items():
        if key == '$or':
            if not any(matches(doc, q) for q in cond):
                return False
            continue
        value = doc.get(key)
        if isinstance(cond, dict):
            for op, arg in cond.items():
                if op == '$lt':
                    ok = value is not None and value < arg
                elif op == '$in':
                    ok = value in arg
                else:
                    raise NotImplementedError(op)
                if not ok:
                    return False
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, collection, query):
        self.collection = collection
        self.query = query

    async def to_list(self, length=None):
        self.collection.check()
        found = [copy.deepcopy(d) for d in self.collection.docs if matches(d, self.query)]
        return found if length is None else found[:length]


class FakeCollection:
    """In-memory stand-in for the few Motor collection calls the app makes."""

    def __init__(self):
        self.docs = []
        self.fail = False

    def check(self):
        if self.fail:
            raise PyMongoError('store unavailable')

    def find(self, query=None):
        return FakeCursor(self, query or {})

    async def find_one(self, query):
        self.check()
        for d in self.docs:
            if matches(d, query):
                return copy.deepcopy(d)
        return None

    async def insert_one(self, doc):
        self.check()
        doc.setdefault('_id', ObjectId())
        self.docs.append(copy.deepcopy(doc))

    async def insert_many(self, docs):
        self.check()
        for doc in docs:
            doc.setdefault('_id', ObjectId())
            self.docs.append(copy.deepcopy(doc))

    async def replace_one(self, query, replacement):
        self.check()
        for i, d in enumerate(self.docs):
            if matches(d, query):
                new = copy.deepcopy(replacement)
                new['_id'] = d['_id']
                self.docs[i] = new
                return

    async def delete_one(self, query):
        self.check()
        for i, d in enumerate(self.docs):
            if matches(d, query):
                del self.docs[i]
                return

    async def delete_many(self, query):
        self.check()
        self.docs = [d for d in self.docs if not matches(d, query)]


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += timedelta(milliseconds=ms)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0))


@pytest.fixture
def store():
    return ChatStore(FakeCollection(), FakeCollection())


@pytest.fixture
def settings():
    # sweeps are triggered by hand in tests
    return Settings(refresh_time=3600 * 1000, cutoff_time=10000)


@pytest.fixture
def app(settings, store, clock):
    return create_app(settings, store=store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
