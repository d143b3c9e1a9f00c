# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The stopwatch brackets a whole benchmark run.

~~~
watch = Stopwatch().start()
    the thing to time
measurement = watch.stop(total_bytes)
~~~

Starting captures the monotonic clock and the resource usage of the reading
thread; stopping derives the elapsed time and the throughput. Nothing is
sampled between the two calls so the measurement doesn't distort the run.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional
from typing import Tuple

from vecsum.constants import GIBIBYTE
from vecsum.exceptions import ResourceError

logger = logging.getLogger(__name__)

RESOURCE_LIB = "resource"
try:
    import resource
except ImportError:  # pragma: no cover
    RESOURCE_LIB = "psutil"
    import psutil  # type:ignore


def cpu_times() -> Tuple[float, float]:
    """user and system CPU seconds used so far by this thread (or process)"""
    if RESOURCE_LIB == "resource":
        who = getattr(resource, "RUSAGE_THREAD", resource.RUSAGE_SELF)
        usage = resource.getrusage(who)
        return usage.ru_utime, usage.ru_stime
    times = psutil.Process(os.getpid()).cpu_times()  # pragma: no cover
    return times.user, times.system  # pragma: no cover


@dataclass(frozen=True)
class Measurement:
    start_ns: int
    stop_ns: int
    total_bytes: int
    user_seconds: float = 0.0
    system_seconds: float = 0.0

    @property
    def elapsed(self) -> float:
        """elapsed seconds"""
        return (self.stop_ns - self.start_ns) / 1e9

    @property
    def throughput(self) -> float:
        """GiB per second"""
        elapsed = self.elapsed
        if elapsed <= 0:
            return float("inf")
        return (self.total_bytes / elapsed) / GIBIBYTE

    def report(self) -> str:
        return (
            f"stopwatch: took {self.elapsed:.5g} seconds to read {self.total_bytes} bytes, "
            f"for {self.throughput:.5g} GB/s"
        )

    def as_dict(self) -> dict:
        return {
            "elapsed_seconds": self.elapsed,
            "total_bytes": self.total_bytes,
            "throughput_gib_per_second": self.throughput,
            "user_seconds": self.user_seconds,
            "system_seconds": self.system_seconds,
        }


class Stopwatch:
    def __init__(self, clock=time.monotonic_ns):
        self._clock = clock
        self.start_ns: Optional[int] = None
        self.start_cpu: Tuple[float, float] = (0.0, 0.0)

    def start(self) -> "Stopwatch":
        """
        Capture the start time and resource usage.

        Raises:
            ResourceError: the clock or the resource usage can't be read, the
                run can't be measured so it shouldn't go ahead.
        """
        try:
            self.start_ns = self._clock()
            self.start_cpu = cpu_times()
        except OSError as err:
            raise ResourceError(
                f"Unable to read the clock at start ({err})",
                operation="clock_gettime",
                code=err.errno,
            ) from err
        return self

    def stop(self, total_bytes: int) -> Optional[Measurement]:
        """
        Capture the stop time and build the Measurement.

        A failure here loses the metric but not the run, so it is logged and
        None is returned rather than raising.
        """
        if self.start_ns is None:
            raise ResourceError("Stopwatch stopped before it was started", operation="stop")
        try:
            stop_ns = self._clock()
            user, system = cpu_times()
        except OSError as err:
            logger.warning("Unable to read the clock at stop, no throughput reported (%s)", err)
            return None
        return Measurement(
            start_ns=self.start_ns,
            stop_ns=stop_ns,
            total_bytes=total_bytes,
            user_seconds=user - self.start_cpu[0],
            system_seconds=system - self.start_cpu[1],
        )
