import logging
import math
from array import array

from errors import OutOfMemory

logger = logging.getLogger(__name__)

MIN_CAPACITY = 8
GROWTH_FACTOR = 2

_SLOT_SIZE = array("d").itemsize


def grow_capacity(capacity: int) -> int:
    return max(MIN_CAPACITY, capacity * GROWTH_FACTOR)


class ValueStore:
    """Append-only pool of doubles.

    Slots live in an ``array("d")`` buffer that is replaced wholesale when it
    fills up. Callers only ever see values and integer indices, so an index
    handed out by ``append`` stays valid across every later reallocation.
    """

    def __init__(self, max_capacity: int | None = None):
        self.count = 0
        self.capacity = 0
        self.max_capacity = max_capacity
        self.reallocations = 0
        self._storage = None  # array("d") | None

    @property
    def is_allocated(self) -> bool:
        return self._storage is not None

    def _grow(self):
        new_capacity = grow_capacity(self.capacity)
        if self.max_capacity is not None:
            if self.capacity >= self.max_capacity:
                raise OutOfMemory(
                    self.capacity + 1,
                    self.capacity,
                    message=f"constant pool is full ({self.max_capacity} slots)",
                )
            new_capacity = min(new_capacity, self.max_capacity)

        # Build the new buffer completely before touching self.
        try:
            storage = array("d", bytes(new_capacity * _SLOT_SIZE))
            if self.count:
                storage[: self.count] = self._storage[: self.count]
        except (MemoryError, OverflowError) as e:
            raise OutOfMemory(new_capacity, self.capacity) from e

        logger.debug("constant pool grow %d -> %d (count=%d)", self.capacity, new_capacity, self.count)
        self._storage = storage
        self.capacity = new_capacity
        self.reallocations += 1

    def reserve(self, extra: int):
        """Make room for ``extra`` more appends, or raise OutOfMemory.

        Either way ``count`` and the stored values are untouched, so a caller
        about to append a batch can fail before any of it lands.
        """
        needed = self.count + extra
        if self.max_capacity is not None and needed > self.max_capacity:
            raise OutOfMemory(
                needed,
                self.capacity,
                message=f"constant pool is full ({self.max_capacity} slots)",
            )
        while self.capacity < needed:
            self._grow()

    def append(self, value) -> int:
        if not isinstance(value, (int, float)):
            raise TypeError(f"constant pool holds numbers, got {type(value).__name__}")
        value = float(value)
        if self.count == self.capacity:
            self._grow()
        self._storage[self.count] = value
        self.count += 1
        return self.count - 1

    def read(self, index: int) -> float:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= self.count:
            raise IndexError(f"constant index out of range: {index}")
        return self._storage[index]

    def release(self):
        if self._storage is not None:
            logger.debug("constant pool release (count=%d, capacity=%d)", self.count, self.capacity)
        self._storage = None
        self.count = 0
        self.capacity = 0
        self.reallocations = 0

    def __len__(self):
        return self.count

    def __getitem__(self, index):
        return self.read(index)

    def __iter__(self):
        for i in range(self.count):
            yield self._storage[i]

    def __repr__(self):
        return f"ValueStore(count={self.count}, capacity={self.capacity})"


def render(value) -> str:
    # Shortest round-trip text; integral values drop the ".0".
    value = float(value)
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]
    return text
