# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
FileSystemClient backed by pyarrow.fs.

Addresses are resolved as:

- `default` - the HDFS namenode from the Hadoop configuration (fs.defaultFS)
- `host` or `host:port` - an HDFS namenode
- anything with a scheme (`hdfs://nn:8020`, `file:///`) - whatever
  `pyarrow.fs.FileSystem.from_uri` resolves it to

HDFS connections are made with short-circuit checksum verification disabled,
checksums would otherwise dominate the cost of the reads being measured.

Zero-copy reads use `NativeFile.read_buffer`, which hands back a
`pyarrow.Buffer` over the stream's memory where the stream supports it.
"""

import errno
import os
from typing import Any
from typing import Optional

from vecsum.connectors.clients.base_client import FileSystemClient
from vecsum.connectors.clients.base_client import ZeroCopyOptions
from vecsum.constants import DEFAULT_RPC_ADDRESS
from vecsum.exceptions import MissingDependencyError

SKIP_CHECKSUM_KEY = "dfs.client.read.shortcircuit.skip.checksum"


def _filesystem_module():
    try:
        from pyarrow import fs
    except ImportError as err:  # pragma: no cover
        raise MissingDependencyError(err.name) from err
    return fs


class ArrowFileSystemClient(FileSystemClient):
    def __init__(self, extra_conf: Optional[dict] = None):
        self.extra_conf = {SKIP_CHECKSUM_KEY: "true"}
        if extra_conf:
            self.extra_conf.update(extra_conf)

    def connect(self, address: str) -> Any:
        fs = _filesystem_module()

        if "://" in address:
            filesystem, _ = fs.FileSystem.from_uri(address)
            return filesystem

        if address == DEFAULT_RPC_ADDRESS:
            host, port = DEFAULT_RPC_ADDRESS, 0
        else:
            host, _, port_str = address.partition(":")
            port = int(port_str) if port_str else 8020
        return fs.HadoopFileSystem(host, port, extra_conf=self.extra_conf)

    def get_size(self, handle: Any, path: str) -> int:
        fs = _filesystem_module()

        info = handle.get_file_info(path)
        if info.type == fs.FileType.NotFound:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if info.type == fs.FileType.Directory:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
        return info.size

    def open(self, handle: Any, path: str, mode: str = "rb") -> Any:
        if mode != "rb":
            raise ValueError(f"Files can only be opened for reading, not '{mode}'")
        return handle.open_input_file(path)

    def read(self, file: Any, buffer: memoryview, length: int) -> int:
        return file.readinto(buffer[:length])

    def zero_copy_read(self, file: Any, options: ZeroCopyOptions, max_length: int) -> Optional[Any]:
        buffer = file.read_buffer(max_length)
        if buffer.size == 0:
            return None
        return buffer

    def release_zero_copy_buffer(self, file: Any, buffer: Any) -> None:
        # pyarrow buffers are reference counted, the memory goes back to the
        # stream once the caller drops its last view
        return None

    def seek(self, file: Any, offset: int) -> None:
        file.seek(offset)

    def close(self, file: Any) -> None:
        file.close()

    def disconnect(self, handle: Any) -> None:
        # pyarrow filesystems disconnect when they are garbage collected
        return None
