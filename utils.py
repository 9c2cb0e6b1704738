"""
Shared helpers for the student iterators: error taxonomy, logging setup and
fetch statistics.
"""

import sys
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'


# ---------- Errors ----------

class ExhaustedIteratorError(LookupError):
    """Raised by next()/reverse_next() when no elements remain"""
    pass


class StudentApiError(Exception):
    """Base class for failures coming from the student page source"""
    pass


class QueryTimedOutError(StudentApiError):
    """A single page query timed out; safe to retry"""
    pass


class ApiUnreachableError(StudentApiError):
    """The retry budget for one page fetch ran out"""

    def __init__(self, page_index: Optional[int] = None, attempts: int = 0):
        self.page_index = page_index
        self.attempts = attempts
        if page_index is None:
            message = "Student API unreachable"
        else:
            message = f"Student API unreachable: page {page_index} failed after {attempts} attempt(s)"
        super().__init__(message)


# ---------- Logging ----------

def setup_logging(level: str = "INFO") -> logging.Logger:
    """Setup structured logging for the student iterators"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('student_stats')


# ---------- Fetch statistics ----------

@dataclass
class FetchStats:
    """Track page fetches made by a paginated iterator"""
    pages_fetched: int = 0
    attempts: int = 0
    timeouts: int = 0
    failures: int = 0
    fetched_indices: List[int] = field(default_factory=list)

    def record_attempt(self):
        self.attempts += 1

    def record_timeout(self):
        self.timeouts += 1

    def record_success(self, page_index: int):
        self.pages_fetched += 1
        self.fetched_indices.append(page_index)

    def record_failure(self):
        self.failures += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary"""
        return {
            "pages_fetched": self.pages_fetched,
            "attempts": self.attempts,
            "timeouts": self.timeouts,
            "failures": self.failures,
            "fetched_indices": list(self.fetched_indices),
        }
