# Schemas for what clients are allowed to submit. Documents built by the
# server itself (join/leave notices) do not go through these.
from typing import Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError

BROADCAST = 'Todos'
JOIN_NOTICE = 'entra na sala...'
LEAVE_NOTICE = 'sai da sala...'
TIME_FORMAT = '%H:%M:%S'


class Participant(BaseModel):
    name: str = Field(..., min_length=1)
    lastStatus: Optional[int] = None


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    frm: str = Field(..., alias='from', min_length=1)
    to: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    type: Literal['message', 'private_message']


def validate(model, data):
    """Parse ``data`` into ``model`` or raise ValidationError naming the first bad field."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        where = '.'.join(str(p) for p in first['loc']) or 'body'
        raise ValidationError(f"{where}: {first['msg']}") from e


def status_message(name: str, text: str, time: str) -> dict:
    return {'from': name, 'to': BROADCAST, 'text': text, 'type': 'status', 'time': time}


def millis(when) -> int:
    return int(when.timestamp() * 1000)


def clock_time(when) -> str:
    return when.strftime(TIME_FORMAT)
