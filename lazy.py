"""
Lazy iterators and the combinators that wrap them.

Every iterator here speaks a small explicit protocol: ``has_next()`` says
whether another element can be produced and ``next()`` produces it. Double
ended iterators add ``reverse_next()``, which consumes from the back of the
same unconsumed remainder. Combinators never pull from their upstream before
a downstream call needs the element. ``reduce_`` is the only operation that
drains an iterator.

All concrete iterators also implement ``__iter__``/``__next__`` so they can be
used with ``for`` loops and ``list()``.
"""

from collections.abc import Sequence
from typing import Any, Callable, Generic, Iterable, List, Optional, Protocol, TypeVar, runtime_checkable

from utils import ExhaustedIteratorError


T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class LazyIterator(Protocol[T_co]):
    """Front-only lazy iterator."""

    def has_next(self) -> bool:
        """Return True if at least one more element is available."""
        ...

    def next(self) -> T_co:
        """Return the next element, raising ExhaustedIteratorError if there is none."""
        ...


@runtime_checkable
class DoubleEndedIterator(LazyIterator[T_co], Protocol[T_co]):
    """Lazy iterator that can also be consumed from the back.

    ``has_next()`` reports availability from either end, both ends draw from
    one shared remainder.
    """

    def reverse_next(self) -> T_co:
        """Return the last unconsumed element, raising ExhaustedIteratorError if there is none."""
        ...


def exhausted_error(direction: str = "front") -> ExhaustedIteratorError:
    return ExhaustedIteratorError(f"No more elements to iterate from the {direction}")


def has_next_back(it) -> bool:
    """has_next() for an iterator about to be consumed from the back.

    Iterators that look ahead (filters) expose has_next_back() so the lookahead
    pulls from the back; for the rest has_next() already covers both ends.
    """
    check = getattr(it, "has_next_back", None)
    if check is not None:
        return check()
    return it.has_next()


class PythonIteratorMixin:
    """Mixin exposing next() through the builtin iterator protocol."""

    def __iter__(self):
        return self

    def __next__(self):
        try:
            return self.next()
        except ExhaustedIteratorError:
            raise StopIteration from None


# --------- raw collections ----------

class SequenceIterator(PythonIteratorMixin, Generic[T]):
    """Double-ended iterator over an in-memory sequence."""

    def __init__(self, items: Iterable[T]):
        self._items = items if isinstance(items, Sequence) else list(items)
        self._front = 0
        self._back = len(self._items)

    def has_next(self) -> bool:
        return self._front < self._back

    def next(self) -> T:
        if not self.has_next():
            raise exhausted_error()
        item = self._items[self._front]
        self._front += 1
        return item

    def reverse_next(self) -> T:
        if not self.has_next():
            raise exhausted_error("back")
        self._back -= 1
        return self._items[self._back]


def iter_of(items: Iterable[T]) -> SequenceIterator[T]:
    """Wrap a raw collection as a double-ended lazy iterator."""
    return SequenceIterator(items)


# --------- combinators ----------

class Take(PythonIteratorMixin, Generic[T]):
    """At most ``count`` elements of the upstream iterator."""

    def __init__(self, it: LazyIterator[T], count: int):
        if count < 0:
            raise ValueError(f"Cannot take a negative number of elements: {count}")
        self._it = it
        self._remaining = count

    def has_next(self) -> bool:
        return self._remaining > 0 and self._it.has_next()

    def next(self) -> T:
        if not self.has_next():
            raise exhausted_error()
        self._remaining -= 1
        return self._it.next()


class Reversed(PythonIteratorMixin, Generic[T]):
    """Back-to-front view of a double-ended iterator.

    Reversing swaps the two ends, so the result is double-ended as well.
    Lookahead for has_next() happens at the back of the upstream.
    """

    def __init__(self, it: DoubleEndedIterator[T]):
        self._it = it

    def has_next(self) -> bool:
        return has_next_back(self._it)

    def has_next_back(self) -> bool:
        return self._it.has_next()

    def next(self) -> T:
        if not self.has_next():
            raise exhausted_error()
        return self._it.reverse_next()

    def reverse_next(self) -> T:
        if not self.has_next_back():
            raise exhausted_error("back")
        return self._it.next()


class Filter(PythonIteratorMixin, Generic[T]):
    """Elements of the upstream iterator satisfying ``pred``.

    Answering has_next() may require pulling past rejected elements, the
    first accepted one is buffered for the following next().
    """

    def __init__(self, it: LazyIterator[T], pred: Callable[[T], bool]):
        self._it = it
        self._pred = pred
        self._buffered: Optional[T] = None
        self._has_buffered = False

    def _advance(self):
        while self._it.has_next():
            element = self._it.next()
            if self._pred(element):
                self._buffered = element
                self._has_buffered = True
                return
        self._has_buffered = False

    def has_next(self) -> bool:
        if not self._has_buffered:
            self._advance()
        return self._has_buffered

    def next(self) -> T:
        if not self.has_next():
            raise exhausted_error()
        result = self._buffered
        self._buffered = None
        self._has_buffered = False
        return result


class DoubleEndedFilter(PythonIteratorMixin, Generic[T]):
    """Filter over a double-ended iterator, keeping one lookahead slot per end.

    Once the upstream is empty, an element buffered by one end is the only
    one left and is handed to whichever end asks for it.
    """

    def __init__(self, it: DoubleEndedIterator[T], pred: Callable[[T], bool]):
        self._it = it
        self._pred = pred
        self._front: Optional[T] = None
        self._has_front = False
        self._back: Optional[T] = None
        self._has_back = False

    def _advance_front(self):
        while self._it.has_next():
            element = self._it.next()
            if self._pred(element):
                self._front = element
                self._has_front = True
                return

    def _advance_back(self):
        while has_next_back(self._it):
            element = self._it.reverse_next()
            if self._pred(element):
                self._back = element
                self._has_back = True
                return

    def _pop_front(self) -> T:
        result = self._front
        self._front = None
        self._has_front = False
        return result

    def _pop_back(self) -> T:
        result = self._back
        self._back = None
        self._has_back = False
        return result

    def has_next(self) -> bool:
        if self._has_front or self._has_back:
            return True
        self._advance_front()
        return self._has_front

    def has_next_back(self) -> bool:
        if self._has_front or self._has_back:
            return True
        self._advance_back()
        return self._has_back

    def next(self) -> T:
        if not self._has_front:
            self._advance_front()
        if self._has_front:
            return self._pop_front()
        if self._has_back:
            return self._pop_back()
        raise exhausted_error()

    def reverse_next(self) -> T:
        if not self._has_back:
            self._advance_back()
        if self._has_back:
            return self._pop_back()
        if self._has_front:
            return self._pop_front()
        raise exhausted_error("back")


class Map(PythonIteratorMixin, Generic[T, R]):
    """``f`` applied to each upstream element."""

    def __init__(self, it: LazyIterator[T], f: Callable[[T], R]):
        self._it = it
        self._f = f

    def has_next(self) -> bool:
        return self._it.has_next()

    def next(self) -> R:
        if not self.has_next():
            raise exhausted_error()
        return self._f(self._it.next())


class DoubleEndedMap(Map[T, R]):
    """Map that can also be consumed from the back."""

    def has_next_back(self) -> bool:
        return has_next_back(self._it)

    def reverse_next(self) -> R:
        if not self.has_next_back():
            raise exhausted_error("back")
        return self._f(self._it.reverse_next())


class Zip(PythonIteratorMixin, Generic[T, U, R]):
    """``f(l, r)`` for corresponding elements; ends with the shorter side."""

    def __init__(self, lit: LazyIterator[T], rit: LazyIterator[U], f: Callable[[T, U], R]):
        self._lit = lit
        self._rit = rit
        self._f = f

    def has_next(self) -> bool:
        return self._lit.has_next() and self._rit.has_next()

    def next(self) -> R:
        if not self.has_next():
            raise exhausted_error()
        return self._f(self._lit.next(), self._rit.next())


def take(it: LazyIterator[T], count: int) -> Take[T]:
    """Iterator over the first ``count`` elements of ``it`` (or fewer if it runs out)."""
    return Take(it, count)


def reversed_(it: DoubleEndedIterator[T]) -> Reversed[T]:
    """Iterator over ``it`` in back-to-front order."""
    if not isinstance(it, DoubleEndedIterator):
        raise TypeError(f"reversed_ needs a double-ended iterator, got {type(it).__name__}")
    return Reversed(it)


def filter_(it: LazyIterator[T], pred: Callable[[T], bool]):
    """Iterator over the elements of ``it`` satisfying ``pred``.

    Double-ended input gives a double-ended result.
    """
    if isinstance(it, DoubleEndedIterator):
        return DoubleEndedFilter(it, pred)
    return Filter(it, pred)


def map_(it: LazyIterator[T], f: Callable[[T], R]):
    """Iterator over ``f(a), f(b), ...`` for the elements of ``it``.

    Double-ended input gives a double-ended result.
    """
    if isinstance(it, DoubleEndedIterator):
        return DoubleEndedMap(it, f)
    return Map(it, f)


def zip_(lit: LazyIterator[T], rit: LazyIterator[U], f: Callable[[T, U], R]) -> Zip[T, U, R]:
    """Iterator over ``f(a, x), f(b, y), ...``; stops when either side ends."""
    return Zip(lit, rit, f)


def reduce_(it: LazyIterator[T], init: R, f: Callable[[R, T], R]) -> R:
    """Left fold of every remaining element of ``it``: ``f(f(f(init, a), b), c)``."""
    result = init
    while it.has_next():
        result = f(result, it.next())
    return result


# --------- chainable wrapper ----------

class LazyChain(PythonIteratorMixin):
    """
    A chainable wrapper over the combinators. Each operator returns a new
    chain around a new combinator; nothing is pulled until you iterate.
    The wrapped iterator is consumed by the chain, so keep using the chain
    (or the one it returns) rather than the original.
    """

    def __init__(self, source):
        if isinstance(source, LazyChain):
            self._it = source.iterator
        elif isinstance(source, LazyIterator):
            self._it = source
        else:
            self._it = iter_of(source)

    @property
    def iterator(self):
        """The combinator this chain wraps."""
        return self._it

    # --------- chainable operators (lazy) ----------
    def take(self, count):
        return LazyChain(take(self._it, count))

    def reversed(self):
        return LazyChain(reversed_(self._it))

    def filter(self, pred):
        return LazyChain(filter_(self._it, pred))

    def map(self, fn):
        return LazyChain(map_(self._it, fn))

    def zip(self, other, fn=lambda left, right: (left, right)):
        return LazyChain(zip_(self._it, LazyChain(other).iterator, fn))

    # --------- iterator protocol ----------
    def has_next(self):
        return self._it.has_next()

    def next(self):
        return self._it.next()

    # --------- reducing operations (force evaluation) ----------
    def reduce(self, fn, initial):
        """Left fold of the remaining elements"""
        return reduce_(self._it, initial, fn)

    def to_list(self) -> List[Any]:
        return list(self)

    def count(self):
        """Return the count of remaining elements"""
        return self.reduce(lambda acc, _: acc + 1, 0)

    def sum(self, start=0):
        """Return the sum of remaining elements"""
        return self.reduce(lambda acc, x: acc + x, start)

    def first(self, default=None):
        """Return the next element, or default if empty"""
        if self._it.has_next():
            return self._it.next()
        return default
