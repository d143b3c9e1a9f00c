"""
The wide reducer reorders the additions, so it is compared to a sequential sum
with a tolerance except where the inputs are small non-negative integers, which
must sum exactly.
"""

import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import math
import tracemalloc

import numpy
import pytest

from vecsum.compute import get_reducer
from vecsum.compute import simple_sum
from vecsum.compute import vecsum
from vecsum.compute.reducer import SIMPLE_SLICE_DOUBLES
from vecsum.constants import ReducerType


@pytest.mark.parametrize("count", [16, 32, 1024, 1024 * 1024])
def test_all_ones_sum_exactly(count):
    buffer = numpy.ones(count, dtype=numpy.float64)
    assert vecsum(buffer) == float(count)


def test_small_integers_sum_exactly():
    buffer = numpy.arange(4096, dtype=numpy.float64) % 251
    assert vecsum(buffer) == float(numpy.sum(buffer.astype(numpy.int64)))


def test_mixed_signs_within_tolerance():
    rng = numpy.random.default_rng(42)
    buffer = rng.standard_normal(16 * 4096) * 1e6
    expected = math.fsum(buffer.tolist())
    assert math.isclose(vecsum(buffer), expected, rel_tol=1e-9, abs_tol=1e-3)
    assert math.isclose(simple_sum(buffer), expected, rel_tol=1e-9, abs_tol=1e-3)


def test_lanes_are_all_accumulated():
    # one distinct power of two per lane, so a dropped lane changes the total
    buffer = numpy.tile(2.0 ** numpy.arange(16), 4)
    assert vecsum(buffer) == 4 * (2.0**16 - 1)


def test_empty_buffer():
    buffer = numpy.empty(0, dtype=numpy.float64)
    assert vecsum(buffer) == 0.0
    assert simple_sum(buffer) == 0.0


def test_reducer_does_not_modify_input():
    buffer = numpy.linspace(-1.0, 1.0, 160)
    before = buffer.copy()
    vecsum(buffer)
    simple_sum(buffer)
    assert numpy.array_equal(buffer, before)


def test_returns_python_float():
    assert type(vecsum(numpy.ones(16))) is float
    assert type(simple_sum(numpy.ones(16))) is float


def test_simple_sum_is_sequential():
    # 1e16 + 1 + 1 ... loses each 1 when added left to right
    buffer = numpy.array([1e16] + [1.0] * 15, dtype=numpy.float64)
    assert simple_sum(buffer) == 1e16


def test_simple_sum_across_slices():
    # the running total carries over each slice boundary in order
    buffer = numpy.ones(2 * SIMPLE_SLICE_DOUBLES + 48, dtype=numpy.float64)
    buffer[0] = 1e16
    assert simple_sum(buffer) == 1e16

    rng = numpy.random.default_rng(7)
    buffer = rng.standard_normal(3 * SIMPLE_SLICE_DOUBLES + 16)
    assert simple_sum(buffer) == float(numpy.cumsum(buffer)[-1])


def test_simple_sum_memory_is_bounded():
    buffer = numpy.ones(32 * SIMPLE_SLICE_DOUBLES, dtype=numpy.float64)
    tracemalloc.start()
    try:
        assert simple_sum(buffer) == float(buffer.size)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    # a little over one slice, never a copy of the whole buffer
    assert peak < 4 * SIMPLE_SLICE_DOUBLES * 8, peak
    assert peak < buffer.nbytes // 4, peak


def test_get_reducer():
    assert get_reducer(ReducerType.WIDE) is vecsum
    assert get_reducer(ReducerType.SIMPLE) is simple_sum
    assert get_reducer("simple") is simple_sum


if __name__ == "__main__":  # pragma: no cover
    from tests import run_tests

    run_tests()
