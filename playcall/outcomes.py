"""Closed vocabulary of play outcomes and its tier decomposition.

Every outcome identifier is a run of underscore separated tokens. The first
token names the type (RUN or PASS); runs may carry a direction, passes carry
either the INCOMPLETE marker or a depth followed by a direction. Anything else
(sacks, turnovers, scores, penalties) has no tiers at all.
"""
from enum import Enum
from typing import NamedTuple, Optional

from playcall.errors import InvalidOutcome

RUN = 'run'
PASS = 'pass'

DEPTHS = ('back', 'short', 'long')
DIRECTIONS = ('left', 'center', 'right')

_RUN_MARKER = 'RUN'
_PASS_MARKER = 'PASS'
_INCOMPLETE_MARKER = 'INCOMPLETE'


class Outcome(str, Enum):
    RUN_LEFT = 'RUN_LEFT'
    RUN_CENTER = 'RUN_CENTER'
    RUN_RIGHT = 'RUN_RIGHT'

    PASS_BACK_LEFT = 'PASS_BACK_LEFT'
    PASS_BACK_CENTER = 'PASS_BACK_CENTER'
    PASS_BACK_RIGHT = 'PASS_BACK_RIGHT'
    PASS_SHORT_LEFT = 'PASS_SHORT_LEFT'
    PASS_SHORT_CENTER = 'PASS_SHORT_CENTER'
    PASS_SHORT_RIGHT = 'PASS_SHORT_RIGHT'
    PASS_LONG_LEFT = 'PASS_LONG_LEFT'
    PASS_LONG_CENTER = 'PASS_LONG_CENTER'
    PASS_LONG_RIGHT = 'PASS_LONG_RIGHT'
    PASS_INCOMPLETE = 'PASS_INCOMPLETE'

    SACK = 'SACK'
    INTERCEPTION = 'INTERCEPTION'
    FUMBLE = 'FUMBLE'
    TOUCHDOWN = 'TOUCHDOWN'
    PENALTY_REPLAY_DOWN = 'PENALTY_REPLAY_DOWN'

    @classmethod
    def coerce(cls, value) -> 'Outcome':
        """Return the member for ``value`` or raise InvalidOutcome."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidOutcome(f'Unknown play outcome: {value!r}') from None


class ParsedPrediction(NamedTuple):
    type: Optional[str]
    depth: Optional[str] = None
    direction: Optional[str] = None

    @property
    def has_tiers(self) -> bool:
        return self.type is not None


def parse(outcome) -> ParsedPrediction:
    tokens = Outcome.coerce(outcome).value.split('_')
    head, rest = tokens[0], tokens[1:]
    if head == _RUN_MARKER:
        direction = rest[0].lower() if rest else None
        return ParsedPrediction(RUN, direction=direction)
    if head == _PASS_MARKER:
        if not rest or rest[0] == _INCOMPLETE_MARKER:
            return ParsedPrediction(PASS)
        depth = rest[0].lower()
        direction = rest[1].lower() if len(rest) > 1 else None
        return ParsedPrediction(PASS, depth=depth, direction=direction)
    return ParsedPrediction(None)


def vocabulary():
    """Serializable listing of every outcome and its tiers."""
    return [dict(value=o.value, **parse(o)._asdict()) for o in Outcome]
