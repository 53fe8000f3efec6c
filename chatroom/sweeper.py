"""Background eviction of participants that stopped sending /status."""
import asyncio
from datetime import datetime
from typing import Callable, List

from .log import get_logger
from .models import LEAVE_NOTICE, clock_time, millis, status_message

log = get_logger(__name__)


class PresenceSweeper:
    def __init__(self, participants, messages, refresh_time: int = 15000,
                 cutoff_time: int = 10000, clock: Callable[[], datetime] = datetime.now):
        self.participants = participants
        self.messages = messages
        self.refresh_time = refresh_time
        self.cutoff_time = cutoff_time
        self.clock = clock

    async def sweep(self) -> List[str]:
        """Remove stale participants and announce their departure. Returns their names."""
        now = self.clock()
        stale = {'lastStatus': {'$lt': millis(now) - self.cutoff_time}}
        gone = await self.participants.find(stale).to_list(length=None)
        if not gone:
            return []
        names = [p['name'] for p in gone]
        notices = [status_message(name, LEAVE_NOTICE, clock_time(now)) for name in names]
        # two separate batches; a failure in between is not rolled back
        await self.participants.delete_many({'_id': {'$in': [p['_id'] for p in gone]}})
        await self.messages.insert_many(notices)
        log.info('evicted %d idle participant(s): %s', len(names), ', '.join(names))
        return names

    async def tick(self) -> None:
        try:
            await self.sweep()
        except Exception:
            log.exception('presence sweep failed')

    async def run(self) -> None:
        # each tick finishes before the next sleep starts, so sweeps never overlap
        while True:
            await asyncio.sleep(self.refresh_time / 1000)
            await self.tick()
