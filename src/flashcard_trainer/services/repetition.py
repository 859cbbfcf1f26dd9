"""
# Spaced Repetition Service

This module implements the **review scheduler**: a simplified **SM-2** algorithm that,
given a recall-quality rating, updates a flashcard's easiness factor, repetition counter
and interval, and derives the next review date.

## Algorithm

1.  **Easiness**: `EF' = max(1.3, EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))`.
    Quality 5 raises it slightly, quality 0 drops it sharply, never below 1.3.
2.  **Lapse** (`q < 3`): repetitions reset to 0, interval to 1 day.
3.  **Success** (`q >= 3`): repetitions + 1, then
    - first repetition: 1 day
    - second repetition: 6 days
    - afterwards: `round(previous_interval * EF')` (previous interval, *updated* easiness)
4.  **Next review**: now + interval whole days.
5.  **Known**: `q >= 3`.

The scheduler is a pure function. It neither validates the quality nor persists anything;
`validate_quality()` is provided for the boundary layer.

## Usage Example

```python
outcome = schedule(SchedulingState(repetitions=2, easiness=2.6, interval=6), quality=4)
outcome.repetitions  # 3
outcome.interval     # 16
```
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from flashcard_trainer.exceptions import InvalidQualityError

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

MIN_EASINESS = 1.3
INITIAL_EASINESS = 2.5
INITIAL_INTERVAL = 1
INITIAL_REPETITIONS = 0

SECOND_INTERVAL = 6


@dataclass(frozen=True)
class SchedulingState:
    """Scheduling fields of a flashcard read before a review."""

    repetitions: int = INITIAL_REPETITIONS
    easiness: float = INITIAL_EASINESS
    interval: int = INITIAL_INTERVAL


@dataclass(frozen=True)
class ReviewOutcome:
    """Scheduling fields to write back after a review."""

    repetitions: int
    easiness: float
    interval: int
    next_review: datetime
    known: bool


def validate_quality(quality) -> int:
    """
    Check that `quality` is an integer rating in [0, 5].

    Raises:
        InvalidQualityError: For out-of-range values, booleans and non-integers.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def update_easiness(easiness: float, quality: int) -> float:
    penalty = MAX_QUALITY - quality
    return max(MIN_EASINESS, easiness + (0.1 - penalty * (0.08 + penalty * 0.02)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def schedule(current: SchedulingState, quality: int, now: Optional[datetime] = None) -> ReviewOutcome:
    """
    Compute the scheduling state that follows a review of `quality`.

    Args:
        current: Repetitions, easiness and interval before the review.
        quality: Recall rating, 0 (blackout) to 5 (perfect). Not validated here.
        now: Review instant. Defaults to the current UTC time.

    Returns:
        ReviewOutcome: Updated repetitions, easiness, interval, next review date and
            known flag.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    easiness = update_easiness(current.easiness, quality)

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = INITIAL_INTERVAL
    else:
        repetitions = current.repetitions + 1
        if repetitions == 1:
            interval = INITIAL_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = _round_half_up(current.interval * easiness)

    return ReviewOutcome(
        repetitions=repetitions,
        easiness=easiness,
        interval=interval,
        next_review=now + timedelta(days=interval),
        known=quality >= PASSING_QUALITY,
    )
