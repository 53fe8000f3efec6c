from datetime import datetime
from typing import Callable, List, Optional

from .errors import Conflict, NotFound
from .log import get_logger
from .models import JOIN_NOTICE, Participant, clock_time, millis, status_message, validate
from .store import store_errors

log = get_logger(__name__)


class ParticipantRegistry:
    """Who is in the room, and when each of them was last heard from."""

    def __init__(self, participants, messages, clock: Callable[[], datetime] = datetime.now):
        self.participants = participants
        self.messages = messages
        self.clock = clock

    async def register(self, name) -> None:
        participant = validate(Participant, {'name': name})
        with store_errors('register'):
            if await self.participants.find_one({'name': participant.name}):
                raise Conflict('name taken')
            now = self.clock()
            await self.participants.insert_one({'name': participant.name, 'lastStatus': millis(now)})
            # not atomic with the insert above
            await self.messages.insert_one(status_message(participant.name, JOIN_NOTICE, clock_time(now)))
        log.info('%s joined', participant.name)

    async def list(self) -> List[dict]:
        with store_errors('list participants'):
            docs = await self.participants.find({}).to_list(length=None)
        return [{'name': d['name'], 'lastStatus': d.get('lastStatus')} for d in docs]

    async def heartbeat(self, name: Optional[str]) -> None:
        if not name:
            raise NotFound('no such participant')
        with store_errors('heartbeat'):
            if not await self.participants.find_one({'name': name}):
                raise NotFound('no such participant')
            await self.participants.replace_one(
                {'name': name}, {'name': name, 'lastStatus': millis(self.clock())})

    async def resolve(self, name: Optional[str]) -> Optional[str]:
        """Return ``name`` if it belongs to a registered participant, else None."""
        if not name:
            return None
        with store_errors('resolve participant'):
            doc = await self.participants.find_one({'name': name})
        return doc['name'] if doc else None
