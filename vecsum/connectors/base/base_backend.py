# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The BaseBackend provides the common interface for the read strategies.

A backend produces the file as a series of chunk buffers, one pass at a time:

~~~
backend.open()
for pass_number, total in backend.run(passes, reducer):
    ...
backend.close()
~~~

Subclasses implement `open`, `next_chunk`, `reset_to_start` and `close`;
`chunks`, `run_pass` and `run` are built on those.
"""

from typing import Callable
from typing import Iterator
from typing import Optional
from typing import Tuple

import numpy

from vecsum.config import Configuration
from vecsum.constants import BackendType
from vecsum.models.read_statistics import ReadStatistics
from vecsum.utils.alignment import check_byte_size

Reducer = Callable[[numpy.ndarray], float]


class BaseBackend:
    __type__: BackendType
    # remote backends are opened by the driver before the stopwatch starts
    SESSION_SCOPED: bool = True
    DEFAULT_CHUNK_SIZE: int

    def __init__(
        self,
        *,
        configuration: Configuration,
        statistics: Optional[ReadStatistics] = None,
        chunk_size: Optional[int] = None,
        **kwargs,
    ) -> None:
        """
        Parameters:
            configuration: Configuration
                The run's configuration, the path is read from here.
            statistics: ReadStatistics
                Counters to update, a new set is created if not provided.
            chunk_size: int
                Override the backend's chunk size, only used by tests.
        """
        self.configuration = configuration
        self.path = configuration.path
        self.chunk_size = self.DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size
        check_byte_size(self.chunk_size, f"{type(self).__name__} chunk size")
        self.statistics = ReadStatistics() if statistics is None else statistics
        self.is_open = False

    @property
    def name(self) -> str:
        return self.__type__.value

    @property
    def length(self) -> int:  # pragma: no cover
        """the length of the file in bytes, available once opened"""
        raise NotImplementedError("Subclasses must implement length property.")

    def open(self) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement open method.")

    def next_chunk(self) -> Optional[numpy.ndarray]:  # pragma: no cover
        """
        Return the next chunk of the current pass, or None once the pass has
        reached the end of the file.
        """
        raise NotImplementedError("Subclasses must implement next_chunk method.")

    def release_chunk(self) -> None:
        """hand back the chunk last returned by next_chunk, if the backend lends them"""
        return None

    def reset_to_start(self) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement reset_to_start method.")

    def close(self) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement close method.")

    def chunks(self) -> Iterator[numpy.ndarray]:
        """
        Yield the chunks of one pass.

        Each chunk is released when the consumer asks for the next one, or when
        the consumer stops early; a chunk must not be kept beyond that.
        """
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return
            try:
                yield chunk
            finally:
                del chunk
                self.release_chunk()

    def run_pass(self, reducer: Reducer) -> float:
        total = 0.0
        for chunk in self.chunks():
            total += reducer(chunk)
        return total

    def run(self, passes: int, reducer: Reducer) -> Iterator[Tuple[int, float]]:
        """
        Read the file `passes` times, yielding the pass number and the sum of
        each pass as it completes.

        If the backend isn't open it is opened here and closed when the passes
        end, otherwise opening and closing is left to the caller.
        """
        opened_here = not self.is_open
        if opened_here:
            self.open()
        try:
            for pass_number in range(passes):
                total = self.run_pass(reducer)
                self.statistics.increase("passes_completed")
                yield pass_number, total
                self.reset_to_start()
        finally:
            if opened_here:
                self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
