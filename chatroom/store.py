"""MongoDB access through Motor.

Only two collections are used, ``participants`` and ``messages``. Components
receive the collection objects directly, so anything exposing the same
coroutine methods (find_one, find().to_list, insert_one, insert_many,
replace_one, delete_one, delete_many) can stand in for them.
"""
from contextlib import contextmanager

import motor.motor_asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from .errors import StoreError
from .log import get_logger

log = get_logger(__name__)


class ChatStore:
    def __init__(self, participants, messages, client: AsyncIOMotorClient = None):
        self.participants = participants
        self.messages = messages
        self.client = client

    @classmethod
    def connect(cls, mongo_url: str, db_name: str):
        client = motor.motor_asyncio.AsyncIOMotorClient(mongo_url)
        db = client[db_name]
        return cls(db.participants, db.messages, client)

    def close(self):
        if self.client:
            self.client.close()


@contextmanager
def store_errors(action: str):
    """Report driver failures as StoreError so callers only see ChatError."""
    try:
        yield
    except PyMongoError as e:
        log.exception('store failure during %s: %s', action, e)
        raise StoreError() from e
