"""Drive boundaries for game-breaker gating.

Nothing in the data marks where a drive starts, so the boundary is a rule
applied to consecutive plays of a game. A rule is a callable
``(previous_play, play) -> bool`` returning True when ``play`` opens a new
drive. The rule in use is picked by the ``DRIVE_BOUNDARY_RULE`` config key.
"""
from typing import Callable, Dict, List, Optional, Sequence

from flask import current_app

from playcall.outcomes import Outcome

DEFAULT_RULE = 'possession'

POSSESSION_CHANGING_OUTCOMES = frozenset({
    Outcome.TOUCHDOWN.value,
    Outcome.INTERCEPTION.value,
    Outcome.FUMBLE.value,
})

_rules: Dict[str, Callable] = {}


def drive_rule(name: str):
    def decorator(fn):
        _rules[name] = fn
        return fn
    return decorator


@drive_rule('possession')
def possession_changed(previous, play) -> bool:
    if previous.actual_outcome in POSSESSION_CHANGING_OUTCOMES:
        return True
    # Punt, field goal or turnover on downs
    if previous.down == 4:
        return True
    # Second half kickoff
    return previous.quarter <= 2 < play.quarter


@drive_rule('quarter')
def quarter_changed(previous, play) -> bool:
    return previous.quarter != play.quarter


@drive_rule('game')
def single_drive(previous, play) -> bool:
    return False


def get_rule(name: Optional[str] = None) -> Callable:
    if name is None:
        name = current_app.config.get('DRIVE_BOUNDARY_RULE', DEFAULT_RULE)
    try:
        return _rules[name]
    except KeyError:
        raise ValueError(f'Unknown drive boundary rule: {name!r}') from None


def drive_window(plays: Sequence, play, rule: Optional[Callable] = None) -> List:
    """Plays of ``play``'s drive that come before it, oldest first.

    ``plays`` must be the game's plays in sequence order.
    """
    rule = rule or get_rule()
    ordered = [p for p in plays if p.sequence_number < play.sequence_number]
    window = []
    current = play
    for previous in reversed(ordered):
        if rule(previous, current):
            break
        window.append(previous)
        current = previous
    window.reverse()
    return window


def drive_of(plays: Sequence, play, rule: Optional[Callable] = None) -> List:
    """Every play of ``play``'s drive, including ``play`` and plays created after it.

    A later play whose predecessor has no outcome yet stays in the drive
    unless the rule finds a boundary from down or quarter alone.
    """
    rule = rule or get_rule()
    drive = drive_window(plays, play, rule) + [play]
    current = play
    for following in (p for p in plays if p.sequence_number > play.sequence_number):
        if rule(current, following):
            break
        drive.append(following)
        current = following
    return drive
