from datetime import datetime
from typing import Callable, List, Optional

from bson import ObjectId

from .errors import NotFound, Unauthorized
from .log import get_logger
from .models import Message, clock_time, validate
from .registry import ParticipantRegistry
from .store import store_errors

log = get_logger(__name__)

PUBLIC_TYPES = ['message', 'status']


def public(doc: dict) -> dict:
    out = dict(doc)
    if '_id' in out:
        out['_id'] = str(out['_id'])
    return out


def visible_to(requester: Optional[str]) -> dict:
    # private messages only reach their sender and recipient
    if not requester:
        return {'type': {'$in': PUBLIC_TYPES}}
    return {'$or': [
        {'type': {'$in': PUBLIC_TYPES}},
        {'from': requester},
        {'to': requester},
    ]}


class MessageLog:
    def __init__(self, messages, registry: ParticipantRegistry,
                 clock: Callable[[], datetime] = datetime.now):
        self.messages = messages
        self.registry = registry
        self.clock = clock

    async def append(self, user: Optional[str], to, text, type) -> None:
        sender = await self.registry.resolve(user)
        msg = validate(Message, {'from': sender or '', 'to': to, 'text': text, 'type': type})
        doc = msg.model_dump(by_alias=True)
        doc['time'] = clock_time(self.clock())
        with store_errors('append message'):
            await self.messages.insert_one(doc)

    async def list(self, requester: Optional[str], limit: Optional[int] = None) -> List[dict]:
        with store_errors('list messages'):
            docs = await self.messages.find(visible_to(requester)).to_list(length=None)
        if limit:
            docs = docs[-limit:]
        return [public(d) for d in docs]

    async def delete(self, requester: Optional[str], message_id: str) -> None:
        doc = await self._owned(requester, message_id)
        with store_errors('delete message'):
            await self.messages.delete_one({'_id': doc['_id']})
        log.info('message %s deleted by %s', message_id, requester)

    async def _owned(self, requester, message_id):
        if not ObjectId.is_valid(message_id):
            raise NotFound('no such message')
        with store_errors('find message'):
            doc = await self.messages.find_one({'_id': ObjectId(message_id)})
        if not doc:
            raise NotFound('no such message')
        if doc.get('from') != requester:
            raise Unauthorized('not the sender')
        return doc
