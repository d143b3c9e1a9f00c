# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The 'zerocopy' backend asks the client for buffers over memory the client
already holds, rather than having the data copied into a buffer of ours.

Those buffers are borrowed, each is handed back before the next is requested
so the client can reuse the memory behind it.
"""

import logging
from typing import Any
from typing import Optional

import numpy

from vecsum.connectors.base.remote_backend import RemoteBackend
from vecsum.connectors.clients.base_client import ZeroCopyOptions
from vecsum.constants import ELEMENT_DTYPE
from vecsum.constants import ZCR_READ_CHUNK_SIZE
from vecsum.constants import BackendType
from vecsum.exceptions import ReadError
from vecsum.exceptions import describe_error

logger = logging.getLogger(__name__)


class ZeroCopyBackend(RemoteBackend):
    __type__ = BackendType.ZEROCOPY

    DEFAULT_CHUNK_SIZE = ZCR_READ_CHUNK_SIZE

    def __init__(self, **kwargs):
        RemoteBackend.__init__(self, **kwargs)
        self.options: Optional[ZeroCopyOptions] = None
        self._borrowed: Optional[Any] = None

    def open(self) -> None:
        if self.is_open:
            return
        RemoteBackend.open(self)
        self.options = ZeroCopyOptions(skip_checksum=True, buffer_pool=None)

    def next_chunk(self) -> Optional[numpy.ndarray]:
        if self._borrowed is not None:
            # the previous chunk wasn't handed back
            self.release_chunk()
        try:
            buffer = self.client.zero_copy_read(self.session.file, self.options, self.chunk_size)
        except OSError as err:
            raise ReadError(
                f"zero-copy read of {self.path} failed with {describe_error(err)}",
                path=self.path,
                operation="zero_copy_read",
                code=err.errno,
            ) from err
        self.statistics.increase("read_calls")
        if buffer is None:
            return None

        self._borrowed = buffer
        length = len(buffer)
        if length < self.chunk_size:
            self.release_chunk()
            raise ReadError(
                f"zero-copy read of {self.path} got a partial read of length {length}",
                path=self.path,
                operation="zero_copy_read",
            )
        self.statistics.increase("chunks_read")
        self.statistics.increase("bytes_read", self.chunk_size)
        self.statistics.increase("zero_copy_bytes_read", self.chunk_size)
        return numpy.frombuffer(buffer, dtype=ELEMENT_DTYPE, count=self.chunk_size // ELEMENT_DTYPE.itemsize)

    def release_chunk(self) -> None:
        buffer, self._borrowed = self._borrowed, None
        if buffer is not None:
            self.client.release_zero_copy_buffer(self.session.file, buffer)

    def close(self) -> None:
        try:
            if self.session is not None and not self.session.closed:
                self.release_chunk()
        finally:
            self.options = None
            RemoteBackend.close(self)
