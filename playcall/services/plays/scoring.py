from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from playcall.outcomes import PASS, RUN, parse

TYPE_POINTS = {RUN: 140, PASS: 220}
DIRECTION_POINTS = 70
DEPTH_POINTS = {'back': 380, 'short': 200, 'long': 290}

GAME_BREAKER_FACTOR = 2

# (minimum streak, multiplier), highest band first
STREAK_BANDS = (
    (10, Decimal('3.0')),
    (5, Decimal('2.0')),
    (3, Decimal('1.5')),
    (1, Decimal('1.2')),
    (0, Decimal('1.0')),
)

EXACT = 'exact'
PARTIAL = 'partial'
MISS = 'miss'


class ScoreResult(NamedTuple):
    score: int
    new_streak: int
    match: str


def streak_multiplier(streak: int) -> Decimal:
    for floor, multiplier in STREAK_BANDS:
        if streak >= floor:
            return multiplier
    raise ValueError(f'streak must be non-negative, got {streak}')


def classify(predicted, actual) -> str:
    p, a = parse(predicted), parse(actual)
    if not p.has_tiers or p.type != a.type:
        return MISS
    if p.depth is not None and p.depth != a.depth:
        return PARTIAL
    if p.direction is not None and p.direction != a.direction:
        return PARTIAL
    return EXACT


def tier_points(outcome) -> int:
    """Sum of every tier value ``outcome`` specifies (0 for untyped outcomes)."""
    parsed = parse(outcome)
    if not parsed.has_tiers:
        return 0
    points = TYPE_POINTS[parsed.type]
    if parsed.depth is not None:
        points += DEPTH_POINTS[parsed.depth]
    if parsed.direction is not None:
        points += DIRECTION_POINTS
    return points


def score_prediction(predicted, actual, streak: int = 0, game_breaker: bool = False) -> ScoreResult:
    """Score one prediction against the actual outcome.

    The multiplier pipeline is base -> game-breaker (x2) -> streak band of
    the streak going *into* this play, rounded half-up. The returned streak
    only depends on the match class: exact increments, partial holds, a miss
    resets to zero.
    """
    if streak < 0:
        raise ValueError(f'streak must be non-negative, got {streak}')

    match = classify(predicted, actual)
    if match == EXACT:
        base, new_streak = tier_points(predicted), streak + 1
    elif match == PARTIAL:
        base, new_streak = TYPE_POINTS[parse(predicted).type], streak
    else:
        base, new_streak = 0, 0

    factor = GAME_BREAKER_FACTOR if game_breaker else 1
    total = Decimal(base) * factor * streak_multiplier(streak)
    score = int(total.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return ScoreResult(score, new_streak, match)
