# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The 'standard' backend reads the file with ordinary blocking reads, copying
each chunk into one buffer which is reused for every chunk of every pass.
"""

import logging
from typing import Optional

import numpy

from vecsum.connectors.base.remote_backend import RemoteBackend
from vecsum.constants import NORMAL_READ_CHUNK_SIZE
from vecsum.constants import BackendType
from vecsum.exceptions import ReadError
from vecsum.exceptions import describe_error

logger = logging.getLogger(__name__)


class StandardReadBackend(RemoteBackend):
    __type__ = BackendType.STANDARD

    DEFAULT_CHUNK_SIZE = NORMAL_READ_CHUNK_SIZE
    NEEDS_BUFFER = True

    def read_fully(self, length: int) -> int:
        """
        Fill the first `length` bytes of the session buffer.

        Interrupted reads are resumed, any other failure ends the run.

        Returns:
            The number of bytes read, less than `length` only at the end of
            the file.
        """
        session = self.session
        view = session.buffer_bytes
        nread = 0
        while nread < length:
            try:
                count = self.client.read(session.file, view[nread:], length - nread)
            except InterruptedError:
                self.statistics.increase("interrupted_reads")
                continue
            except OSError as err:
                raise ReadError(
                    f"read of {self.path} failed with {describe_error(err)}",
                    path=self.path,
                    operation="read",
                    code=err.errno,
                ) from err
            self.statistics.increase("read_calls")
            if count == 0:
                break
            nread += count
        return nread

    def next_chunk(self) -> Optional[numpy.ndarray]:
        nread = self.read_fully(self.chunk_size)
        if nread == 0:
            return None
        if nread < self.chunk_size:
            raise ReadError(
                f"read of {self.path} got a partial read of length {nread}",
                path=self.path,
                operation="read",
            )
        self.statistics.increase("chunks_read")
        self.statistics.increase("bytes_read", nread)
        return self.session.buffer
