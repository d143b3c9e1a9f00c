# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Shared behaviour for the backends which read through a FileSystemClient.
"""

from typing import Optional

from vecsum.connectors.base.base_backend import BaseBackend
from vecsum.connectors.clients.base_client import FileSystemClient
from vecsum.exceptions import ReadError
from vecsum.exceptions import describe_error
from vecsum.models.session import Session


class RemoteBackend(BaseBackend):
    # the read loop needs a reusable buffer
    NEEDS_BUFFER: bool = False

    def __init__(self, *, client: Optional[FileSystemClient] = None, **kwargs):
        BaseBackend.__init__(self, **kwargs)
        if client is None:
            from vecsum.connectors.clients.arrow_client import ArrowFileSystemClient

            client = ArrowFileSystemClient()
        self.client = client
        self.session: Optional[Session] = None

    @property
    def length(self) -> int:
        if self.session is None:
            raise ReadError(f"{self.path} has not been opened", path=self.path, operation="length")
        return self.session.length

    def open(self) -> None:
        if self.is_open:
            return
        self.session = Session.create(
            client=self.client,
            address=self.configuration.rpc_address,
            path=self.path,
            chunk_size=self.chunk_size,
            with_buffer=self.NEEDS_BUFFER,
        )
        self.is_open = True

    def reset_to_start(self) -> None:
        try:
            self.session.seek(0)
        except OSError as err:
            raise ReadError(
                f"Unable to seek to the start of {self.path}: {describe_error(err)}",
                path=self.path,
                operation="seek",
                code=err.errno,
            ) from err

    def close(self) -> None:
        self.is_open = False
        if self.session is not None:
            self.session.close()
