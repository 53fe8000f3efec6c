"""Connectivity check for the MongoDB the chat backend is configured with.
Run this after starting MongoDB: python -m chatroom.check_mongo
"""
import asyncio

from .config import Settings
from .log import configure, get_logger
from .store import ChatStore

log = get_logger(__name__)


async def probe(settings: Settings) -> bool:
    store = ChatStore.connect(settings.mongo_url, settings.mongo_db)
    log.info('using MONGODB_URI=%s', settings.mongo_url)
    try:
        dbs = await store.client.list_database_names()
        log.info('connected to MongoDB, databases: %s', dbs)
        return True
    except Exception as e:
        log.error('connection failed: %s', e)
        return False
    finally:
        store.close()


def main():
    settings = Settings.from_env()
    configure(settings.log_level)
    ok = asyncio.run(probe(settings))
    raise SystemExit(0 if ok else 1)


if __name__ == '__main__':
    main()
