# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The FileSystemClient is the interface the remote backends read through.

The backends rely only on the blocking behaviour and error semantics described
here, not on any transport:

- every call blocks until it has data, has reached the end of the file, or
  has failed
- failures are raised as OSError (or a subclass), an interrupted read is
  raised as InterruptedError and may be retried
- `read` returns fewer bytes than asked for only at the end of the file, and
  0 once the end has been reached
- `zero_copy_read` returns None at the end of the file, otherwise a buffer
  which supports the buffer protocol and len(), backed by memory the client
  owns; it must be handed back with `release_zero_copy_buffer` before the
  next request
"""

from dataclasses import dataclass
from typing import Any
from typing import Optional


@dataclass(frozen=True)
class ZeroCopyOptions:
    skip_checksum: bool = True
    # None means the client must not fall back to copying into pooled buffers
    buffer_pool: Optional[Any] = None


class FileSystemClient:
    """
    Base class for remote filesystem clients.
    """

    def connect(self, address: str) -> Any:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement connect method.")

    def get_size(self, handle: Any, path: str) -> int:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement get_size method.")

    def open(self, handle: Any, path: str, mode: str = "rb") -> Any:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement open method.")

    def read(self, file: Any, buffer: memoryview, length: int) -> int:  # pragma: no cover
        """
        Read up to `length` bytes into the start of `buffer`.

        Returns:
            The number of bytes read, 0 at the end of the file.
        """
        raise NotImplementedError("Subclasses must implement read method.")

    def zero_copy_read(
        self, file: Any, options: ZeroCopyOptions, max_length: int
    ) -> Optional[Any]:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement zero_copy_read method.")

    def release_zero_copy_buffer(self, file: Any, buffer: Any) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement release_zero_copy_buffer method.")

    def seek(self, file: Any, offset: int) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement seek method.")

    def close(self, file: Any) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement close method.")

    def disconnect(self, handle: Any) -> None:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement disconnect method.")
