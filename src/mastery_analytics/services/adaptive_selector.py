"""Target difficulty selection from a learner's running accuracy."""

import math
from typing import Tuple

from ..utils.exceptions import InvalidInputException

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
MEDIUM_DIFFICULTY = 3


def next_difficulty(correct_count: int, attempted_count: int) -> int:
    """Pick the 1-5 difficulty for the next question.

    Above 80% accuracy the target climbs with the rate, below 50% it
    drops with it, and anything in between stays on the medium band.
    """
    if correct_count < 0:
        raise InvalidInputException("correct_count", correct_count, "must not be negative")
    if attempted_count < 0:
        raise InvalidInputException("attempted_count", attempted_count, "must not be negative")

    rate = correct_count / max(1, attempted_count)
    if rate > 0.8:
        return min(MAX_DIFFICULTY, math.ceil(rate * 5))
    if rate < 0.5:
        return max(MIN_DIFFICULTY, math.floor(rate * 5))
    return MEDIUM_DIFFICULTY


class AdaptiveSelector:
    """Stateless wrapper used by the question layer."""

    def next_difficulty(self, correct_count: int, attempted_count: int) -> int:
        return next_difficulty(correct_count, attempted_count)

    def difficulty_band(self, target: int) -> Tuple[int, int]:
        """Inclusive window of question difficulties acceptable for ``target``."""
        if not MIN_DIFFICULTY <= target <= MAX_DIFFICULTY:
            raise InvalidInputException("target", target, "must be between 1 and 5")
        return (max(MIN_DIFFICULTY, target - 1), min(MAX_DIFFICULTY, target + 1))

    def band_for(self, correct_count: int, attempted_count: int) -> Tuple[int, int]:
        return self.difficulty_band(self.next_difficulty(correct_count, attempted_count))
