from tests.tools import run_tests
from tests.tools import skip_if

__all__ = ("run_tests", "skip_if")
