"""
Double-ended iterator over student records pulled page by page from the
student API.

The full list is never loaded: a page is queried only when the forward or
backward cursor needs its first element. Queries that time out are retried
up to a fixed budget per page before the API is declared unreachable.
"""

import logging
from typing import Optional, Protocol, Sequence

from lazy import PythonIteratorMixin, exhausted_error
from models import IteratorConfig, Student
from utils import ApiUnreachableError, FetchStats, QueryTimedOutError, setup_logging

logger = logging.getLogger(__name__)


DEFAULT_RETRIES = 3


class PageSource(Protocol):
    """Interface of the paginated student API"""

    def get_page(self, index: int) -> Sequence[Student]:
        """Return page ``index``; may raise QueryTimedOutError."""
        ...

    def get_num_pages(self) -> int:
        ...

    def get_num_students(self) -> int:
        ...


class StudentListIterator(PythonIteratorMixin):
    """
    A double-ended iterator over the students of a PageSource.

    Both ends draw from one remaining-students counter, which is what keeps
    them from producing the same student when they meet inside a page.
    """

    def __init__(self, source: PageSource, retries: int = DEFAULT_RETRIES):
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got {retries}")
        self._source = source
        self._max_retries = retries
        self._remaining = source.get_num_students()
        self.stats = FetchStats()

        # Forward cursor: nothing loaded until the first next()
        self._front_page_index = -1
        self._front_page: Optional[Sequence[Student]] = None
        self._front_pos = 0

        # Backward cursor: targets the last page, loaded on the first reverse_next()
        self._back_page_index = source.get_num_pages()
        self._back_page: Optional[Sequence[Student]] = None
        self._back_pos = -1

    @classmethod
    def from_config(cls, source: PageSource, config: IteratorConfig) -> "StudentListIterator":
        """Build an iterator from a config, applying its retry budget and log level"""
        setup_logging(config.log_level)
        logger.setLevel(config.log_level)
        return cls(source, retries=config.max_retries)

    @property
    def remaining(self) -> int:
        return self._remaining

    def __len__(self):
        return self._remaining

    def has_next(self) -> bool:
        return self._remaining > 0

    def next(self) -> Student:
        if not self.has_next():
            raise exhausted_error()

        # Move to the following page once the current one is used up
        while self._front_page is None or self._front_pos >= len(self._front_page):
            page_index = self._front_page_index + 1
            self._front_page = self._load_page(page_index, self._back_page_index, self._back_page)
            self._front_page_index = page_index
            self._front_pos = 0

        student = self._front_page[self._front_pos]
        self._front_pos += 1
        self._remaining -= 1
        return student

    def reverse_next(self) -> Student:
        if not self.has_next():
            raise exhausted_error("back")

        while self._back_page is None or self._back_pos < 0:
            page_index = self._back_page_index - 1
            self._back_page = self._load_page(page_index, self._front_page_index, self._front_page)
            self._back_page_index = page_index
            self._back_pos = len(self._back_page) - 1

        student = self._back_page[self._back_pos]
        self._back_pos -= 1
        self._remaining -= 1
        return student

    def _load_page(self, page_index: int, other_index: int,
                   other_page: Optional[Sequence[Student]]) -> Sequence[Student]:
        """Return a page, reusing the other cursor's copy when it holds the same one"""
        if other_page is not None and other_index == page_index:
            logger.debug(f"Reusing page {page_index} already held by the other cursor")
            return other_page
        return self._fetch_page(page_index)

    def _fetch_page(self, page_index: int) -> Sequence[Student]:
        """Query one page from the API, retrying timed out queries"""
        last_error = None
        for attempt in range(1, self._max_retries + 1):
            self.stats.record_attempt()
            try:
                page = self._source.get_page(page_index)
            except QueryTimedOutError as e:
                self.stats.record_timeout()
                last_error = e
                logger.warning(
                    f"Query for page {page_index} timed out (attempt {attempt}/{self._max_retries})"
                )
                continue
            self.stats.record_success(page_index)
            logger.debug(f"Fetched page {page_index} with {len(page)} students")
            return page

        self.stats.record_failure()
        logger.error(f"Page {page_index} unreachable after {self._max_retries} attempts")
        raise ApiUnreachableError(page_index, self._max_retries) from last_error
