# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Bespoke error types for vecsum.

Every error is fatal to a benchmark run, none are retried. They exist so the
driver can tell the user which stage failed and why before it exits.

Exception Hierarchy:

Exception
 ├── MissingDependencyError
 └── VecsumError
     ├── AlignmentError
     ├── ConfigError
     ├── ConnectError
     ├── ReadError
     └── ResourceError
"""

from typing import Optional


# ======================== Begin Codebase Errors ========================
class MissingDependencyError(Exception):  # pragma: no cover
    def __init__(self, dependency: str):
        self.dependency = dependency
        message = f"No module named '{dependency}' can be found, please install or include in requirements.txt"
        super().__init__(message)


# ======================== End Codebase Errors ==========================


# ======================== Begin vecsum Superclass ========================
class VecsumError(Exception):
    """
    Superclass of the errors which end a run, catch this to catch them all.

    Where the failure relates to a file or a call to the storage client, the
    path, the operation and the underlying error code are kept on the
    exception so a useful diagnostic can be written.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        code: Optional[int] = None,
    ):
        self.path = path
        self.operation = operation
        self.code = code
        super().__init__(message)


# ======================== End vecsum Superclass ==========================


# ======================== Begin Startup Errors ========================
class ConfigError(VecsumError):
    """Exception raised for missing or invalid configuration."""

    def __init__(
        self,
        *,
        config_item: str,
        provided_value: Optional[str] = None,
        valid_value_description: Optional[str] = None,
    ):
        DISPLAY_LIMIT: int = 32

        self.config_item = config_item
        self.provided_value = provided_value
        self.valid_value_description = valid_value_description

        if provided_value is None:
            message = f"You must set the '{config_item}' environment variable."
        else:
            message = f"Value of '{str(provided_value)[:DISPLAY_LIMIT]}{'...' if len(provided_value) > DISPLAY_LIMIT else ''}' for '{config_item}' is not valid."
        if valid_value_description:
            message += f" Value should be {valid_value_description}."
        super().__init__(message, operation="configure")


class AlignmentError(VecsumError):
    """
    A chunk size, or the length of the file being read, doesn't divide the way
    the reducer and the backends need it to.
    """


# ======================== End Startup Errors ==========================


# ======================== Begin I/O Errors ========================
class ConnectError(VecsumError):
    """Exception raised when the storage can't be reached or the file can't be opened."""


class ReadError(VecsumError):
    """
    Exception raised when a read fails, returns less than a full chunk, or the
    file ends part way through a chunk.
    """


class ResourceError(VecsumError):
    """Exception raised when memory, a mapping, or the clock can't be acquired."""


# ======================== End I/O Errors ==========================


def describe_error(err: Exception) -> str:
    """format an error as `error <code> (<message>)` where there is a code"""
    code = getattr(err, "errno", None)
    if code is None:
        return str(err)
    return f"error {code} ({getattr(err, 'strerror', None) or err})"
