# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from vecsum.compute.reducer import get_reducer
from vecsum.compute.reducer import simple_sum
from vecsum.compute.reducer import vecsum

__all__ = ("get_reducer", "simple_sum", "vecsum")
