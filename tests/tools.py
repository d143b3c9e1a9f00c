"""
Test Harness

Helpers shared by the vecsum tests:

- platform checks used to skip tests which can't run everywhere
- writing benchmark files of doubles
- run_tests(), which runs the test_ functions of the calling module with a
  pass/fail report when a test module is executed directly

Example:
    # In your test module
    def test_example():
        assert True

    if __name__ == "__main__":
        from tests.tools import run_tests

        run_tests()
"""

import os
import platform
from functools import wraps

import numpy


def is_windows():  # pragma: no cover
    return platform.system().lower() == "windows"


def manual():  # pragma: no cover
    """MANUAL_TEST forces conditionally skipped tests to run"""
    return os.environ.get("MANUAL_TEST") is not None


def skip_if(is_true: bool = True):  # pragma: no cover
    """
    Decorator to conditionally skip the execution of a test function based on a condition.

    Example:
        I want to skip this test on Windows machines:

            @skip_if(is_windows())
            def test...
    """

    def decorate(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if is_true and not manual():
                import warnings

                warnings.warn(f"Skipping {func.__name__} because of conditional execution.")
            else:
                return func(*args, **kwargs)

        return wrapper

    return decorate


def doubles(count: int, pattern=(1.0,)) -> numpy.ndarray:
    """`count` doubles repeating `pattern`"""
    pattern = numpy.asarray(pattern, dtype=numpy.float64)
    return numpy.resize(pattern, count)


def write_doubles(path: str, values: numpy.ndarray) -> str:
    with open(path, "wb") as f:
        f.write(numpy.ascontiguousarray(values, dtype=numpy.float64).tobytes())
    return path


def run_tests():  # pragma: no cover
    """
    Discover and run test functions defined in the calling module. Test functions should be named starting with 'test_'.
    """
    import contextlib
    import inspect
    import shutil
    import time
    import traceback
    from io import StringIO

    os.environ["MANUAL_TEST"] = "1"
    display_width = shutil.get_terminal_size((80, 20))[0]

    # Get the calling module
    caller_module = inspect.getmodule(inspect.currentframe().f_back)
    test_methods = [
        obj
        for name, obj in inspect.getmembers(caller_module)
        if inspect.isfunction(obj) and name.startswith("test_")
    ]

    print(f"\n\033[38;2;139;233;253m\033[3mRUNNING SET OF {len(test_methods)} TESTS\033[0m\n")
    start_suite = time.monotonic_ns()

    passed = 0
    failed = 0

    for index, method in enumerate(test_methods):
        start_time = time.monotonic_ns()
        test_name = f"\033[38;2;255;184;108m{(index + 1):04}\033[0m \033[38;2;189;147;249m{method.__name__}\033[0m"
        print(test_name.ljust(display_width - 20), end="", flush=True)
        error = None
        try:
            with contextlib.redirect_stdout(StringIO()):
                method()
        except Exception as err:
            error = err
        if error is None:
            passed += 1
            status = "\033[38;2;26;185;67m pass"
        else:
            failed += 1
            status = "\033[38;2;255;121;198m fail"
        time_taken = int((time.monotonic_ns() - start_time) / 1e6)
        print(f"\033[0;32m{str(time_taken).rjust(8)}ms {status}\033[0m")
        if error:
            file_name, line_number, _, code_line = traceback.extract_tb(error.__traceback__)[-1]
            print(
                f"  \033[38;2;255;121;198m{error.__class__.__name__}\033[0m {error}\n"
                f"  \033[38;2;241;250;140m{file_name.split(os.sep)[-1]}\033[0m:{line_number} {code_line}"
            )

    print(
        f"\n\033[38;2;139;233;253m\033[3mCOMPLETE\033[0m ({((time.monotonic_ns() - start_suite) / 1e9):.2f} seconds)\n"
        f"  \033[38;2;26;185;67m{passed} passed\033[0m\n"
        f"  \033[38;2;255;121;198m{failed} failed\033[0m"
    )
