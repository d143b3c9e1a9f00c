# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The driver runs one benchmark from start to finish.

1. the built-in chunk sizes are checked, before anything else happens
2. the configuration is resolved
3. the backend is created, remote backends open their session here
4. the stopwatch is started
5. each pass is read and reduced, its sum printed as it completes
6. the stopwatch is stopped and the throughput printed, only if every pass
   succeeded
7. the backend is closed, whatever happened

The outcome is the process exit status, 0 for success and 1 for any failure.
"""

import logging
import sys
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import TextIO

from vecsum.compute import get_reducer
from vecsum.config import Configuration
from vecsum.connectors import backend_factory
from vecsum.connectors.clients.base_client import FileSystemClient
from vecsum.exceptions import ReadError
from vecsum.exceptions import VecsumError
from vecsum.exceptions import describe_error
from vecsum.models.read_statistics import ReadStatistics
from vecsum.utils.alignment import validate_chunk_sizes
from vecsum.utils.timer import Measurement
from vecsum.utils.timer import Stopwatch

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class RunResult:
    """What a run produced, kept for callers which want more than the exit status."""

    def __init__(self):
        self.status: int = EXIT_FAILURE
        self.sums: list = []
        self.measurement: Optional[Measurement] = None
        self.error: Optional[Exception] = None
        self.statistics = ReadStatistics()

    @property
    def succeeded(self) -> bool:
        return self.status == EXIT_SUCCESS


def release(backend, result: RunResult) -> None:
    """
    Close the backend. A failure here fails a run which had otherwise
    succeeded, but never replaces the error which ended a failed run.
    """
    try:
        backend.close()
    except OSError as err:
        error = ReadError(
            f"failed to close {backend.path}: {describe_error(err)}",
            path=backend.path,
            operation="close",
            code=err.errno,
        )
        logger.error("vecsum %s failed: %s", backend.name, error)
        if result.error is None:
            result.error = error
            result.status = EXIT_FAILURE


def run(
    configuration: Configuration,
    *,
    client: Optional[FileSystemClient] = None,
    chunk_size: Optional[int] = None,
    output: Optional[TextIO] = None,
    stopwatch_factory: Callable[[], Stopwatch] = Stopwatch,
) -> RunResult:
    """
    Run the benchmark the configuration describes.

    Parameters:
        configuration: Configuration
            The resolved configuration.
        client: FileSystemClient (optional)
            The client for the remote backends, pyarrow.fs if not provided.
        chunk_size: int (optional)
            Override the backend's chunk size, only used by tests.
        output: TextIO (optional)
            Where the pass and summary lines are written, stdout by default.

    Returns:
        RunResult, the status is 0 only if every pass completed.
    """
    output = sys.stdout if output is None else output
    result = RunResult()
    reducer = get_reducer(configuration.reducer)

    backend = None
    try:
        backend = backend_factory(
            configuration, client=client, statistics=result.statistics, chunk_size=chunk_size
        )
        if backend.SESSION_SCOPED:
            backend.open()

        watch = stopwatch_factory().start()
        for pass_number, total in backend.run(configuration.passes, reducer):
            result.sums.append(total)
            print(f"finished {backend.name} pass {pass_number}.  sum = {total:g}", file=output)

        result.measurement = watch.stop(backend.length * configuration.passes)
        if result.measurement is not None:
            print(result.measurement.report(), file=output)
        result.status = EXIT_SUCCESS
    except VecsumError as err:
        logger.error("vecsum %s failed: %s", configuration.backend.value, err)
        result.error = err
    finally:
        if backend is not None:
            release(backend, result)

    return result


def main(
    environment: Optional[Mapping[str, str]] = None,
    *,
    config_file: Optional[str] = None,
    client: Optional[FileSystemClient] = None,
    output: Optional[TextIO] = None,
    report_statistics: bool = False,
) -> int:
    """
    Check the chunk sizes, load the configuration and run, returning the exit status.
    """
    try:
        validate_chunk_sizes()
        configuration = Configuration.load(environment, config_file)
    except VecsumError as err:
        logger.error("%s", err)
        return EXIT_FAILURE

    if configuration.debug:
        logging.getLogger("vecsum").setLevel(logging.DEBUG)

    result = run(configuration, client=client, output=output)
    if report_statistics and result.succeeded:
        measurement = result.measurement.as_dict() if result.measurement is not None else None
        print(
            result.statistics.to_json(measurement).decode(),
            file=sys.stdout if output is None else output,
        )
    return result.status
