# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
vecsum measures how quickly a file of doubles can be read and summed through
three read strategies: standard blocking reads and zero-copy reads from a
remote filesystem, and a local memory map.

To get started:
    VECSUM_PATH=data.bin VECSUM_PASSES=2 VECSUM_TYPE=local python -m vecsum
"""

from vecsum.__version__ import __author__
from vecsum.__version__ import __build__
from vecsum.__version__ import __version__
from vecsum.config import Configuration
from vecsum.driver import main
from vecsum.driver import run

__all__ = ("Configuration", "main", "run", "__author__", "__build__", "__version__")
