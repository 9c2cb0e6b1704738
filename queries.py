"""
Queries over a student iterator, built only from the lazy combinators.

Students arrive from the API in increasing id order, so "newest first" is the
reverse of API order and needs no sorting.
"""

from itertools import count
from typing import Callable

from lazy import DoubleEndedIterator, LazyIterator, filter_, map_, reduce_, reversed_, take, zip_
from models import Student


def students_for_unit(students: LazyIterator[Student], unit: str):
    """Students with a mark for ``unit``, in API order."""
    return filter_(students, lambda s: s.unit == unit)


def students_for_unit_newest_first(students: DoubleEndedIterator[Student], unit: str):
    """Students with a mark for ``unit``, newest first."""
    return reversed_(students_for_unit(students, unit))


def newest_students(students: DoubleEndedIterator[Student], n: int):
    """The ``n`` most recently added students, newest first."""
    return take(reversed_(students), n)


def count_students(students: LazyIterator[Student], pred: Callable[[Student], bool]) -> int:
    """Drain ``students`` and count those satisfying ``pred``."""
    return reduce_(students, 0, lambda total, s: total + 1 if pred(s) else total)


def names(students: LazyIterator[Student]):
    """Student names, consumable from either end when ``students`` is."""
    return map_(students, lambda s: s.name)


class _Counter:
    """Endless lazy iterator 1, 2, 3, ..."""

    def __init__(self, start: int = 1):
        self._values = count(start)

    def has_next(self) -> bool:
        return True

    def next(self) -> int:
        return next(self._values)


def pair_with_rank(students: LazyIterator[Student]):
    """``(rank, student)`` pairs, ranks starting at 1."""
    return zip_(_Counter(), students, lambda rank, s: (rank, s))


def top_marks(students: LazyIterator[Student], threshold: float, n: int):
    """First ``n`` students whose mark is at least ``threshold``."""
    graded = filter_(students, lambda s: s.mark is not None and s.mark >= threshold)
    return take(graded, n)
