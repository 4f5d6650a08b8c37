"""Recall quality scale for reviews (0 = blackout, 5 = perfect recall)."""

from enum import IntEnum


class Quality(IntEnum):
    """Learner's self-assessed recall for one review."""
    AGAIN = 0
    MISS = 1
    HARD = 2
    OK = 3
    GOOD = 4
    EASY = 5

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def hint(self) -> str:
        return _HINTS[self]

    @property
    def is_lapse(self) -> bool:
        return self < LAPSE_THRESHOLD


# Ratings below this collapse the interval and reset the streak
LAPSE_THRESHOLD = 3

_LABELS = {
    Quality.AGAIN: "Again",
    Quality.MISS: "Miss",
    Quality.HARD: "Hard",
    Quality.OK: "OK",
    Quality.GOOD: "Good",
    Quality.EASY: "Easy",
}

_HINTS = {
    Quality.AGAIN: "Total blackout",
    Quality.MISS: "Couldn't recall",
    Quality.HARD: "Barely remembered",
    Quality.OK: "Needed some thought",
    Quality.GOOD: "Minor recall effort",
    Quality.EASY: "I knew it instantly",
}
