import logging

import pytest
from student_list import StudentListIterator
from utils import ApiUnreachableError, QueryTimedOutError, StudentApiError


class TestRetry:
    """Test retrying of timed out page queries"""

    @pytest.mark.parametrize("failures, retries", [(0, 1), (1, 2), (2, 3), (2, 5), (4, 5)])
    def test_succeeds_within_budget(self, api_factory, failures, retries):
        """Test that k timeouts are survived with a budget of at least k + 1"""
        api = api_factory([3, 2], timeouts={0: failures})
        it = StudentListIterator(api, retries=retries)

        assert it.next().id == 0
        assert api.page_requests == [0] * (failures + 1)
        assert it.stats.timeouts == failures
        assert it.stats.attempts == failures + 1

    @pytest.mark.parametrize("failures, retries", [(1, 1), (2, 2), (3, 2), (5, 3)])
    def test_unreachable_when_budget_exhausted(self, api_factory, failures, retries):
        """Test that k timeouts with a budget of at most k raise ApiUnreachableError"""
        api = api_factory([3, 2], timeouts={0: failures})
        it = StudentListIterator(api, retries=retries)

        with pytest.raises(ApiUnreachableError) as exc_info:
            it.next()

        assert exc_info.value.page_index == 0
        assert exc_info.value.attempts == retries
        assert isinstance(exc_info.value.__cause__, QueryTimedOutError)
        assert api.page_requests == [0] * retries

    def test_fresh_budget_per_page(self, api_factory):
        """Test that every page fetch gets its own retry budget"""
        api = api_factory([2, 2, 2], timeouts_per_page=2)
        it = StudentListIterator(api, retries=3)

        assert [s.id for s in it] == [0, 1, 2, 3, 4, 5]
        assert it.stats.timeouts == 6
        assert it.stats.pages_fetched == 3

    def test_backward_fetch_retries(self, api_factory):
        """Test that reverse_next() retries too"""
        api = api_factory([3, 2], timeouts={1: 2})
        it = StudentListIterator(api, retries=3)
        assert it.reverse_next().id == 4
        assert api.page_requests == [1, 1, 1]

    def test_unreachable_leaves_state_untouched(self, api_factory):
        """Test that a failed fetch does not consume a student"""
        api = api_factory([3, 2], timeouts={1: 2})
        it = StudentListIterator(api, retries=2)

        with pytest.raises(ApiUnreachableError):
            it.reverse_next()
        assert it.remaining == 5

        # The API has recovered, the next attempt gets a fresh budget
        assert it.reverse_next().id == 4

    def test_other_errors_propagate(self):
        """Test that non-timeout errors from the API are not retried"""
        class BrokenApi:
            def __init__(self):
                self.calls = 0

            def get_page(self, index):
                self.calls += 1
                raise RuntimeError("corrupt page")

            def get_num_pages(self):
                return 1

            def get_num_students(self):
                return 1

        api = BrokenApi()
        it = StudentListIterator(api, retries=5)
        with pytest.raises(RuntimeError):
            it.next()
        assert api.calls == 1

    def test_error_hierarchy(self):
        """Test that both API errors share a base class"""
        assert issubclass(QueryTimedOutError, StudentApiError)
        assert issubclass(ApiUnreachableError, StudentApiError)
        assert not issubclass(ApiUnreachableError, QueryTimedOutError)

    def test_timeouts_are_logged(self, api_factory, caplog):
        """Test that timeouts and unreachable pages are logged"""
        api = api_factory([1], timeouts={0: 5})
        it = StudentListIterator(api, retries=2)

        with caplog.at_level(logging.WARNING, logger="student_list"):
            with pytest.raises(ApiUnreachableError):
                it.next()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(warnings) == 2
        assert len(errors) == 1
        assert "page 0" in errors[0].getMessage().lower()
