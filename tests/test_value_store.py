import math
import struct

import pytest

import value
from errors import OutOfMemory, TallyError
from value import ValueStore, render


def bits(x):
    return struct.unpack("<Q", struct.pack("<d", x))[0]


def test_fresh_store_is_empty():
    store = ValueStore()
    assert store.count == 0
    assert store.capacity == 0
    assert len(store) == 0
    assert not store.is_allocated
    assert list(store) == []


def test_release_on_fresh_store_matches_fresh_store():
    store = ValueStore()
    store.release()
    assert (store.count, store.capacity, store.is_allocated) == (0, 0, False)
    assert store.reallocations == 0


def test_append_returns_sequential_indices_without_dedup():
    store = ValueStore()
    assert store.append(3.0) == 0
    assert store.append(4.5) == 1
    assert store.append(3.0) == 2
    assert store.count == 3
    assert store.read(0) == 3.0
    assert store.read(2) == 3.0
    assert store[1] == 4.5


def test_first_append_allocates_minimum_capacity():
    store = ValueStore()
    store.append(1.0)
    assert store.capacity == value.MIN_CAPACITY == 8
    assert store.is_allocated
    assert store.reallocations == 1


def test_ninth_append_doubles_capacity():
    store = ValueStore()
    for i in range(9):
        store.append(i)
    assert store.count == 9
    assert store.capacity == 16


def test_values_survive_growth():
    store = ValueStore()
    indices = [store.append(i * 1.5) for i in range(100)]
    assert indices == list(range(100))
    for i in range(100):
        assert store.read(i) == i * 1.5


def test_growth_is_logarithmic():
    store = ValueStore()
    n = 1000
    for i in range(n):
        store.append(i)
    # 8, 16, 32, ..., 1024
    assert store.capacity == 1024
    assert store.reallocations == math.ceil(math.log2(n / 8)) + 1
    assert store.capacity >= n


def test_non_finite_values_round_trip_bit_identical():
    payload_nan = struct.unpack("<d", struct.pack("<Q", 0x7FF8000000000ABC))[0]
    samples = [0.0, -0.0, math.inf, -math.inf, payload_nan, 5e-324, 1.7976931348623157e308]
    store = ValueStore()
    for v in samples:
        store.append(v)
    for i, v in enumerate(samples):
        assert bits(store.read(i)) == bits(v)


def test_read_out_of_range():
    store = ValueStore()
    with pytest.raises(IndexError):
        store.read(0)
    store.append(1.0)
    with pytest.raises(IndexError):
        store.read(1)
    with pytest.raises(IndexError):
        store.read(-1)


def test_read_past_count_inside_capacity():
    store = ValueStore()
    store.append(1.0)
    assert store.capacity > store.count
    with pytest.raises(IndexError):
        store.read(store.count)


def test_release_resets_and_allows_reuse():
    store = ValueStore()
    for i in range(20):
        store.append(i)
    store.release()
    assert (store.count, store.capacity, store.is_allocated) == (0, 0, False)
    store.release()

    assert store.append(7.0) == 0
    assert store.capacity == 8
    assert store.read(0) == 7.0


def test_max_capacity_clamps_growth():
    store = ValueStore(max_capacity=10)
    for i in range(9):
        store.append(i)
    assert store.capacity == 10


def test_out_of_memory_leaves_store_intact():
    store = ValueStore(max_capacity=10)
    for i in range(10):
        store.append(i)

    with pytest.raises(OutOfMemory) as exc_info:
        store.append(99.0)

    assert isinstance(exc_info.value, TallyError)
    assert exc_info.value.capacity == 10
    assert store.count == 10
    assert store.capacity == 10
    assert list(store) == [float(i) for i in range(10)]


def test_allocation_failure_becomes_out_of_memory(monkeypatch):
    store = ValueStore()
    for i in range(8):
        store.append(i)

    monkeypatch.setattr(value, "grow_capacity", lambda capacity: 2 ** 62)
    with pytest.raises(OutOfMemory) as exc_info:
        store.append(8.0)

    assert exc_info.value.requested == 2 ** 62
    assert store.count == 8
    assert store.capacity == 8
    assert store.reallocations == 1
    assert store.read(7) == 7.0


def test_append_coerces_ints():
    store = ValueStore()
    store.append(3)
    assert isinstance(store.read(0), float)


def test_append_rejects_non_numbers():
    store = ValueStore()
    for bad in ("3.5", "nan", None, [1.0]):
        with pytest.raises(TypeError):
            store.append(bad)
    assert store.count == 0
    assert not store.is_allocated


def test_reserve_grows_ahead_of_appends():
    store = ValueStore()
    store.append(1.0)
    store.reserve(20)
    assert store.count == 1
    assert store.capacity == 32
    assert store.reallocations == 3
    for i in range(20):
        store.append(i)
    assert store.capacity == 32
    assert store.reallocations == 3


def test_reserve_past_ceiling_changes_nothing():
    store = ValueStore(max_capacity=4)
    store.append(1.0)
    capacity = store.capacity

    with pytest.raises(OutOfMemory) as exc_info:
        store.reserve(4)

    assert exc_info.value.requested == 5
    assert store.count == 1
    assert store.capacity == capacity
    assert list(store) == [1.0]
    store.reserve(3)
    assert store.capacity == 4


def test_render_formats():
    assert render(3.0) == "3"
    assert render(4.5) == "4.5"
    assert render(-0.0) == "-0"
    assert render(0.0) == "0"
    assert render(0.1) == "0.1"
    assert render(1e16) == "1e+16"
    assert render(math.inf) == "inf"
    assert render(-math.inf) == "-inf"
    assert render(math.nan) == "nan"


def test_render_is_deterministic_and_distinguishes_neighbours():
    a = 0.1
    b = math.nextafter(a, 1.0)
    assert render(a) == render(a)
    assert render(a) != render(b)
    assert float(render(b)) == b
