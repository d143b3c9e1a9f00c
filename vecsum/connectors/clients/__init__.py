# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from vecsum.connectors.clients.arrow_client import ArrowFileSystemClient
from vecsum.connectors.clients.base_client import FileSystemClient
from vecsum.connectors.clients.base_client import ZeroCopyOptions

__all__ = ("ArrowFileSystemClient", "FileSystemClient", "ZeroCopyOptions")
