# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Summation of chunk buffers.

The reading benchmarks are only meaningful if the work done on each chunk is
bound by memory bandwidth rather than by the latency of a single chain of
additions, so `vecsum` keeps eight independent two-lane accumulators.

Each step consumes sixteen doubles, two into each accumulator:

    step i:  acc[0] += buf[16i + 0:2]  ...  acc[7] += buf[16i + 14:16]

With numpy this is a reshape to (steps, 8, 2) and an add-reduce over the
first axis, which advances all sixteen lanes in lockstep. The accumulators are
then folded pairwise (8 -> 4 -> 2 -> 1) and the two remaining lanes summed.

The order of the additions differs from a left-to-right sum so results are
only equal within floating point tolerance, except where every value is a
small non-negative integer, which sum exactly in any order.
"""

from typing import Callable

import numpy

from vecsum.constants import DOUBLES_PER_LOOP_ITER
from vecsum.constants import ELEMENT_DTYPE
from vecsum.constants import ReducerType

ACCUMULATORS: int = 8
LANES: int = DOUBLES_PER_LOOP_ITER // ACCUMULATORS
# 1 MiB of doubles accumulated at a time by simple_sum
SIMPLE_SLICE_DOUBLES: int = 128 * 1024


def vecsum(buffer: numpy.ndarray) -> float:
    """
    Sum a buffer of doubles using eight wide accumulators.

    The length of the buffer must be a multiple of DOUBLES_PER_LOOP_ITER, this
    is guaranteed by the chunk size checks and is not checked here.

    Parameters:
        buffer: numpy.ndarray
            One dimensional array of float64 values.

    Returns:
        The sum as a Python float.
    """
    steps = buffer.reshape(-1, ACCUMULATORS, LANES)
    accumulators = numpy.add.reduce(steps, axis=0, dtype=ELEMENT_DTYPE)
    # tree reduction to keep the final dependency chain short
    while accumulators.shape[0] > 1:
        accumulators = accumulators[0::2] + accumulators[1::2]
    hi, lo = accumulators[0]
    return float(hi + lo)


def simple_sum(buffer: numpy.ndarray) -> float:
    """
    Sum a buffer of doubles strictly left to right.

    This is the baseline the wide reducer is compared against; a cumulative sum
    is the only numpy reduction which is guaranteed to be sequential. The buffer
    is walked in slices of SIMPLE_SLICE_DOUBLES, each slice is accumulated in a
    scratch array which starts with the running total, so the extra memory is
    one slice whatever the size of the buffer.
    """
    total = 0.0
    if buffer.size == 0:
        return total
    scratch = numpy.empty(min(buffer.size, SIMPLE_SLICE_DOUBLES) + 1, dtype=ELEMENT_DTYPE)
    for start in range(0, buffer.size, SIMPLE_SLICE_DOUBLES):
        piece = buffer[start : start + SIMPLE_SLICE_DOUBLES]
        window = scratch[: piece.size + 1]
        window[0] = total
        window[1:] = piece
        numpy.add.accumulate(window, out=window)
        total = window[-1]
    return float(total)


_REDUCERS = {
    ReducerType.WIDE: vecsum,
    ReducerType.SIMPLE: simple_sum,
}


def get_reducer(reducer_type: ReducerType) -> Callable[[numpy.ndarray], float]:
    return _REDUCERS[ReducerType(reducer_type)]
