"""
Pytest configuration for the student iterator tests.

Puts the project root on the Python path so tests can import lazy,
student_list, queries, models and utils, and provides a fake paginated
student API with failure injection.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from lazy import SequenceIterator
from models import Student
from utils import ExhaustedIteratorError, QueryTimedOutError


UNITS = ["FIT1045", "FIT2004", "FIT3155"]


def make_students(count, start_id=0):
    """Students with increasing ids, cycling through a few units"""
    return [
        Student(
            id=start_id + i,
            name=f"student_{start_id + i}",
            unit=UNITS[(start_id + i) % len(UNITS)],
            mark=float(((start_id + i) * 17) % 101),
        )
        for i in range(count)
    ]


class FakeStudentList:
    """In-memory paginated student API.

    ``timeouts`` maps a page index to how many queries for that page time out
    before one succeeds; ``timeouts_per_page`` applies to every page.
    """

    def __init__(self, page_sizes, timeouts=None, timeouts_per_page=0):
        self.pages = []
        next_id = 0
        for size in page_sizes:
            self.pages.append(make_students(size, start_id=next_id))
            next_id += size
        self._timeouts_left = {
            index: (timeouts or {}).get(index, timeouts_per_page)
            for index in range(len(self.pages))
        }
        self.page_requests = []

    @property
    def students(self):
        return [s for page in self.pages for s in page]

    def get_page(self, index):
        self.page_requests.append(index)
        if self._timeouts_left.get(index, 0) > 0:
            self._timeouts_left[index] -= 1
            raise QueryTimedOutError(f"query for page {index} timed out")
        return list(self.pages[index])

    def get_num_pages(self):
        return len(self.pages)

    def get_num_students(self):
        return sum(len(page) for page in self.pages)


class CountingIterator(SequenceIterator):
    """Double-ended iterator recording how many elements were pulled"""

    def __init__(self, items):
        super().__init__(items)
        self.pulled = 0

    def next(self):
        item = super().next()
        self.pulled += 1
        return item

    def reverse_next(self):
        item = super().reverse_next()
        self.pulled += 1
        return item


class FrontOnlyCountingIterator:
    """Single-ended iterator recording how many elements were pulled"""

    def __init__(self, items):
        self._items = list(items)
        self._index = 0
        self.pulled = 0

    def has_next(self):
        return self._index < len(self._items)

    def next(self):
        if not self.has_next():
            raise ExhaustedIteratorError("No more elements")
        item = self._items[self._index]
        self._index += 1
        self.pulled += 1
        return item


@pytest.fixture
def counting():
    """Factory for double-ended counting iterators"""
    return CountingIterator


@pytest.fixture
def front_only():
    """Factory for single-ended counting iterators"""
    return FrontOnlyCountingIterator


@pytest.fixture
def small_api():
    """5 students over pages of sizes [3, 2]"""
    return FakeStudentList([3, 2])


@pytest.fixture
def large_api():
    """103 students over pages of 10 (last page short)"""
    return FakeStudentList([10] * 10 + [3])


@pytest.fixture
def api_factory():
    """Factory for fake student APIs: api_factory(page_sizes, timeouts=..., timeouts_per_page=...)"""
    return FakeStudentList
