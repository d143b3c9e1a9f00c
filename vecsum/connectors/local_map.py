# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The 'local' backend memory maps a file on local disk.

The whole file is mapped once and each pass reduces the mapping as a single
chunk, going back to the start is just reading the mapping again. The file is
opened, mapped and unmapped by the backend itself, the driver doesn't hold a
session for it.
"""

import logging
import mmap
import os
from typing import Optional

import numpy

from vecsum.connectors.base.base_backend import BaseBackend
from vecsum.constants import ELEMENT_DTYPE
from vecsum.constants import VECSUM_CHUNK_SIZE
from vecsum.constants import BackendType
from vecsum.exceptions import AlignmentError
from vecsum.exceptions import ConnectError
from vecsum.exceptions import ReadError
from vecsum.exceptions import ResourceError
from vecsum.exceptions import describe_error

logger = logging.getLogger(__name__)


class LocalMapBackend(BaseBackend):
    __type__ = BackendType.LOCAL

    SESSION_SCOPED = False
    DEFAULT_CHUNK_SIZE = VECSUM_CHUNK_SIZE

    def __init__(self, **kwargs):
        BaseBackend.__init__(self, **kwargs)
        self._fd: Optional[int] = None
        self._mmap: Optional[mmap.mmap] = None
        self._view: Optional[numpy.ndarray] = None
        self._length: Optional[int] = None
        self._served = False

    @property
    def length(self) -> int:
        if self._length is None:
            raise ReadError(f"{self.path} has not been opened", path=self.path, operation="length")
        return self._length

    def open(self) -> None:
        if self.is_open:
            return
        try:
            self._fd = os.open(self.path, os.O_RDONLY)
        except OSError as err:
            raise ConnectError(
                f"failed to open {self.path}: {describe_error(err)}",
                path=self.path,
                operation="open",
                code=err.errno,
            ) from err
        try:
            try:
                length = os.fstat(self._fd).st_size
            except OSError as err:
                raise ReadError(
                    f"fstat({self.path}) failed: {describe_error(err)}",
                    path=self.path,
                    operation="fstat",
                    code=err.errno,
                ) from err
            if length == 0 or length % self.chunk_size:
                raise AlignmentError(
                    f"file {self.path} has size {length}, but we need a non-zero "
                    f"size aligned with {self.chunk_size}",
                    path=self.path,
                    operation="fstat",
                )
            try:
                self._mmap = mmap.mmap(self._fd, length, access=mmap.ACCESS_READ)
            except (OSError, ValueError) as err:
                raise ResourceError(
                    f"mmap({self.path}) failed: {describe_error(err)}",
                    path=self.path,
                    operation="mmap",
                    code=getattr(err, "errno", None),
                ) from err
            if hasattr(self._mmap, "madvise") and hasattr(mmap, "MADV_SEQUENTIAL"):
                self._mmap.madvise(mmap.MADV_SEQUENTIAL)
            self._view = numpy.frombuffer(self._mmap, dtype=ELEMENT_DTYPE)
            self._length = length
        except BaseException:
            self._release()
            raise

        self.statistics.increase("mapped_bytes", length)
        self._served = False
        self.is_open = True
        logger.debug("Mapped %s, %d bytes", self.path, length)

    def next_chunk(self) -> Optional[numpy.ndarray]:
        if self._served:
            return None
        self._served = True
        self.statistics.increase("chunks_read")
        self.statistics.increase("bytes_read", self._length)
        return self._view

    def reset_to_start(self) -> None:
        # the mapping is still there, nothing to re-read
        self._served = False

    def _release(self) -> None:
        # views over the mapping have to go before the mapping can be closed
        self._view = None
        mapping, self._mmap = self._mmap, None
        fd, self._fd = self._fd, None
        try:
            if mapping is not None:
                try:
                    mapping.close()
                except BufferError:
                    logger.warning(
                        "%s is still referenced, it will be unmapped when released", self.path
                    )
        finally:
            if fd is not None:
                os.close(fd)

    def close(self) -> None:
        self.is_open = False
        self._release()
