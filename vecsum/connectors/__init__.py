# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Read strategy backends.

There are exactly three, keyed by BackendType:

- StandardReadBackend ('standard'): blocking reads into a reusable buffer
- ZeroCopyBackend ('zerocopy'): borrowed buffers from the storage client
- LocalMapBackend ('local'): a read-only memory map of a local file

The two remote backends read through a FileSystemClient, which defaults to
the pyarrow.fs based ArrowFileSystemClient.
"""

from typing import Optional

from vecsum.config import Configuration
from vecsum.connectors.base.base_backend import BaseBackend
from vecsum.connectors.clients.base_client import FileSystemClient
from vecsum.connectors.local_map import LocalMapBackend
from vecsum.connectors.standard_read import StandardReadBackend
from vecsum.connectors.zero_copy import ZeroCopyBackend
from vecsum.constants import BackendType
from vecsum.models.read_statistics import ReadStatistics

__all__ = (
    "BaseBackend",
    "LocalMapBackend",
    "StandardReadBackend",
    "ZeroCopyBackend",
    "backend_factory",
)

_backends = {
    BackendType.STANDARD: StandardReadBackend,
    BackendType.ZEROCOPY: ZeroCopyBackend,
    BackendType.LOCAL: LocalMapBackend,
}


def backend_factory(
    configuration: Configuration,
    *,
    client: Optional[FileSystemClient] = None,
    statistics: Optional[ReadStatistics] = None,
    chunk_size: Optional[int] = None,
) -> BaseBackend:
    """
    Create the backend the configuration asks for, it is not opened.
    """
    backend_class = _backends[BackendType(configuration.backend)]
    kwargs = {"configuration": configuration, "statistics": statistics, "chunk_size": chunk_size}
    if backend_class.SESSION_SCOPED:
        kwargs["client"] = client
    return backend_class(**kwargs)
