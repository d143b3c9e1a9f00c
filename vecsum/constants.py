# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Fixed sizes and type tags shared by the backends, the reducer and the driver.

The chunk sizes are deliberately not configurable, every file being read must
be an exact multiple of the chunk size used by the backend reading it.
"""

from enum import Enum

import numpy

# the reducer works on doubles
ELEMENT_DTYPE = numpy.dtype(numpy.float64)
ELEMENT_SIZE: int = ELEMENT_DTYPE.itemsize
# doubles consumed per step of the reducer (8 accumulators of 2 lanes)
DOUBLES_PER_LOOP_ITER: int = 16

# fmt:off
# alignment unit for file lengths, used by the driver and the local map
VECSUM_CHUNK_SIZE: int = 8 * 1024 * 1024
# size of each buffer requested by the zero-copy backend
ZCR_READ_CHUNK_SIZE: int = 8 * 1024 * 1024
# size of the reusable buffer filled by the standard read backend
NORMAL_READ_CHUNK_SIZE: int = 8 * 1024 * 1024
# fmt:on

CHUNK_SIZES = {
    "VECSUM_CHUNK_SIZE": VECSUM_CHUNK_SIZE,
    "ZCR_READ_CHUNK_SIZE": ZCR_READ_CHUNK_SIZE,
    "NORMAL_READ_CHUNK_SIZE": NORMAL_READ_CHUNK_SIZE,
}

DEFAULT_RPC_ADDRESS = "default"
GIBIBYTE: int = 1024 * 1024 * 1024


class BackendType(str, Enum):
    STANDARD = "standard"
    ZEROCOPY = "zerocopy"
    LOCAL = "local"

    @classmethod
    def valid_values(cls) -> str:
        names = [member.value for member in cls]
        return ", ".join(names[:-1]) + ", or " + names[-1]


class ReducerType(str, Enum):
    WIDE = "wide"
    SIMPLE = "simple"
