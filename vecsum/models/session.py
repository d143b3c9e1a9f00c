# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The live resources a remote backend holds for the length of a run.

A Session is only handed out once the file is known to be non-empty and an
exact multiple of the chunk size, so the read loops never need to handle a
short final chunk. Closing releases everything it acquired, it is safe to
close a Session more than once.
"""

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Optional

import numpy

from vecsum.constants import ELEMENT_DTYPE
from vecsum.exceptions import AlignmentError
from vecsum.exceptions import ConnectError
from vecsum.exceptions import MissingDependencyError
from vecsum.exceptions import ResourceError
from vecsum.exceptions import describe_error

if TYPE_CHECKING:  # pragma: no cover
    from vecsum.connectors.clients.base_client import FileSystemClient

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        *,
        client: "FileSystemClient",
        connection: Any,
        path: str,
        length: int,
        file: Any = None,
        buffer: Optional[numpy.ndarray] = None,
    ):
        self.client = client
        self.connection = connection
        self.path = path
        self.length = length
        self.file = file
        self.buffer = buffer
        # byte-level view of the reusable buffer for readinto style reads
        self.buffer_bytes: Optional[memoryview] = None
        if buffer is not None:
            self.buffer_bytes = memoryview(buffer.view(numpy.uint8))
        self.closed = False

    @classmethod
    def create(
        cls,
        *,
        client: "FileSystemClient",
        address: str,
        path: str,
        chunk_size: int,
        with_buffer: bool = False,
    ) -> "Session":
        """
        Connect, check the file's size and open it.

        Parameters:
            client: FileSystemClient
                The client to connect with.
            address: str
                The endpoint to connect to.
            path: str
                The file to open.
            chunk_size: int
                The file's length must be a multiple of this.
            with_buffer: bool
                Allocate a reusable read buffer of `chunk_size` bytes.

        Raises:
            ConnectError: the endpoint couldn't be reached, or the file
                couldn't be found or opened.
            AlignmentError: the file is empty or not a multiple of the chunk size.
            ResourceError: the read buffer couldn't be allocated.
        """
        try:
            connection = client.connect(address)
        except MissingDependencyError as err:
            raise ConnectError(
                f"Could not connect to '{address}' ({err})", path=path, operation="connect"
            ) from err
        except (OSError, ValueError) as err:
            raise ConnectError(
                f"Could not connect to '{address}' ({err})",
                path=path,
                operation="connect",
                code=getattr(err, "errno", None),
            ) from err

        session = cls(client=client, connection=connection, path=path, length=0)
        try:
            try:
                session.length = client.get_size(connection, path)
            except (OSError, ValueError) as err:
                raise ConnectError(
                    f"Unable to get the size of {path}: {describe_error(err)}",
                    path=path,
                    operation="get_size",
                    code=getattr(err, "errno", None),
                ) from err

            if session.length == 0:
                raise AlignmentError(f"file {path} has size 0.", path=path, operation="get_size")
            if session.length % chunk_size:
                raise AlignmentError(
                    f"file {path} has size {session.length}, which is not aligned with "
                    f"the chunk size of {chunk_size}",
                    path=path,
                    operation="get_size",
                )

            try:
                session.file = client.open(connection, path, "rb")
            except (OSError, ValueError) as err:
                raise ConnectError(
                    f"Unable to open {path}: {describe_error(err)}",
                    path=path,
                    operation="open",
                    code=getattr(err, "errno", None),
                ) from err

            if with_buffer:
                try:
                    buffer = numpy.empty(chunk_size // ELEMENT_DTYPE.itemsize, dtype=ELEMENT_DTYPE)
                except MemoryError as err:
                    raise ResourceError(
                        f"failed to allocate buffer of size {chunk_size}",
                        path=path,
                        operation="allocate",
                    ) from err
                session.buffer = buffer
                session.buffer_bytes = memoryview(buffer.view(numpy.uint8))
        except BaseException:
            session.close()
            raise

        logger.debug("Opened session for %s, %d bytes", path, session.length)
        return session

    def seek(self, offset: int) -> None:
        self.client.seek(self.file, offset)

    def close(self) -> None:
        """Release the buffer, the file and the connection, in that order."""
        if self.closed:
            return
        self.closed = True
        if self.buffer_bytes is not None:
            self.buffer_bytes.release()
            self.buffer_bytes = None
        self.buffer = None
        try:
            if self.file is not None:
                self.client.close(self.file)
                self.file = None
        finally:
            self.client.disconnect(self.connection)
            self.connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
