"""String similarity scorers used to recognise the same place under different spellings."""

import re
from collections import Counter
from collections.abc import Callable

Similarity = Callable[[str, str], float]

_WHITESPACE = re.compile(r"\s+")


def _bigrams(value: str) -> Counter[str]:
    return Counter(value[i : i + 2] for i in range(len(value) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """Dice coefficient over character bigrams, ignoring whitespace.

    Returns a score in ``[0, 1]``; identical strings score 1 and strings too
    short to form a bigram score 0. Comparison is case-sensitive, callers
    normalise case themselves.
    """
    first = _WHITESPACE.sub("", first)
    second = _WHITESPACE.sub("", second)
    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    overlap = sum((_bigrams(first) & _bigrams(second)).values())
    return 2.0 * overlap / (len(first) + len(second) - 2)
