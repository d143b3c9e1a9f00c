import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pytest

from vecsum.exceptions import ResourceError
from vecsum.utils.timer import Measurement
from vecsum.utils.timer import Stopwatch
from vecsum.utils.timer import cpu_times

GIB = 1024 * 1024 * 1024


class FakeClock:
    def __init__(self, *readings):
        self.readings = list(readings)

    def __call__(self):
        reading = self.readings.pop(0)
        if isinstance(reading, Exception):
            raise reading
        return reading


def test_throughput():
    measurement = Measurement(start_ns=0, stop_ns=2_000_000_000, total_bytes=4 * GIB)
    assert measurement.elapsed == 2.0
    assert measurement.throughput == 2.0


def test_report_line():
    measurement = Measurement(start_ns=1_000_000_000, stop_ns=3_000_000_000, total_bytes=GIB)
    assert measurement.report() == (
        f"stopwatch: took 2 seconds to read {GIB} bytes, for 0.5 GB/s"
    )


def test_zero_elapsed_is_infinite_throughput():
    measurement = Measurement(start_ns=5, stop_ns=5, total_bytes=GIB)
    assert measurement.throughput == float("inf")


def test_stopwatch_measures_between_start_and_stop():
    watch = Stopwatch(clock=FakeClock(10_000_000_000, 14_000_000_000)).start()
    measurement = watch.stop(8 * GIB)
    assert measurement.elapsed == 4.0
    assert measurement.total_bytes == 8 * GIB
    assert measurement.throughput == 2.0
    assert measurement.user_seconds >= 0
    assert measurement.system_seconds >= 0


def test_start_failure_is_fatal():
    watch = Stopwatch(clock=FakeClock(OSError(22, "Invalid argument")))
    with pytest.raises(ResourceError):
        watch.start()


def test_stop_failure_is_not_fatal():
    watch = Stopwatch(clock=FakeClock(1, OSError(22, "Invalid argument"))).start()
    assert watch.stop(GIB) is None


def test_stop_before_start():
    with pytest.raises(ResourceError):
        Stopwatch().stop(0)


def test_real_clock():
    watch = Stopwatch().start()
    measurement = watch.stop(1024)
    assert measurement.elapsed >= 0
    assert set(measurement.as_dict()) == {
        "elapsed_seconds",
        "total_bytes",
        "throughput_gib_per_second",
        "user_seconds",
        "system_seconds",
    }


def test_cpu_times():
    user, system = cpu_times()
    assert user >= 0
    assert system >= 0


if __name__ == "__main__":  # pragma: no cover
    from tests import run_tests

    run_tests()
