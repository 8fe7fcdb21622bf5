from collections import namedtuple
from enum import Enum


class EventKind(Enum):
    CREATED = 'created'
    MODIFIED = 'modified'
    DELETED = 'deleted'


# ``name`` is relative to the registered directory the event was
# reported for.
RawEvent = namedtuple('RawEvent', ['kind', 'name'])

NormalizedEvent = namedtuple(
    'NormalizedEvent', ['kind', 'path', 'is_directory'])
