# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Chunk sizes must hold a whole number of doubles, and a whole number of
reducer steps, otherwise the reducer would either split a double or need a
remainder loop.
"""

from typing import Mapping
from typing import Optional

from vecsum.constants import CHUNK_SIZES
from vecsum.constants import DOUBLES_PER_LOOP_ITER
from vecsum.constants import ELEMENT_SIZE
from vecsum.exceptions import AlignmentError


def check_byte_size(byte_size: int, name: str) -> None:
    """
    Raises:
        AlignmentError: `byte_size` isn't a whole number of reducer steps.
    """
    if byte_size <= 0:
        raise AlignmentError(f"{name} must be greater than 0, not {byte_size}", operation="validate")
    if byte_size % ELEMENT_SIZE:
        raise AlignmentError(
            f"{name} is not a multiple of the size of a double ({ELEMENT_SIZE})",
            operation="validate",
        )
    if (byte_size // ELEMENT_SIZE) % DOUBLES_PER_LOOP_ITER:
        raise AlignmentError(
            f"The number of doubles contained in {name} is not a multiple of "
            f"DOUBLES_PER_LOOP_ITER ({DOUBLES_PER_LOOP_ITER})",
            operation="validate",
        )


def validate_chunk_sizes(chunk_sizes: Optional[Mapping[str, int]] = None) -> None:
    """check every built-in chunk size before anything is opened"""
    for name, byte_size in (CHUNK_SIZES if chunk_sizes is None else chunk_sizes).items():
        check_byte_size(byte_size, name)
