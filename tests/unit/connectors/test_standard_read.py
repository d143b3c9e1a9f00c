import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pytest

from tests.memory_client import MemoryFileSystemClient
from tests.tools import doubles
from vecsum.compute import vecsum
from vecsum.config import Configuration
from vecsum.connectors import StandardReadBackend
from vecsum.constants import NORMAL_READ_CHUNK_SIZE
from vecsum.constants import BackendType
from vecsum.exceptions import ReadError

CHUNK = 128
CHUNKS = 4
PATH = "/bench/doubles.bin"
# 1, 2, 3, 4 repeating, each chunk of 16 doubles sums to 40
PASS_SUM = 40.0 * CHUNKS


def make_backend(**kwargs):
    data = doubles(CHUNK * CHUNKS // 8, pattern=(1.0, 2.0, 3.0, 4.0)).tobytes()
    client = MemoryFileSystemClient({PATH: data}, **kwargs)
    configuration = Configuration(path=PATH, passes=2, backend=BackendType.STANDARD)
    backend = StandardReadBackend(configuration=configuration, client=client, chunk_size=CHUNK)
    return backend, client


def test_default_chunk_size():
    configuration = Configuration(path=PATH, passes=1, backend=BackendType.STANDARD)
    backend = StandardReadBackend(configuration=configuration, client=MemoryFileSystemClient({}))
    assert backend.chunk_size == NORMAL_READ_CHUNK_SIZE
    assert backend.name == "standard"


def test_passes_are_identical():
    backend, client = make_backend()
    backend.open()
    results = list(backend.run(3, vecsum))
    backend.close()
    assert results == [(0, PASS_SUM), (1, PASS_SUM), (2, PASS_SUM)]
    assert backend.statistics.bytes_read == 3 * CHUNK * CHUNKS
    assert backend.statistics.chunks_read == 3 * CHUNKS
    assert backend.statistics.passes_completed == 3
    assert client.count("seek") == 3


def test_interrupted_reads_are_resumed():
    backend, _ = make_backend(interrupt_reads=3)
    with backend:
        backend.open()
        assert backend.run_pass(vecsum) == PASS_SUM
    assert backend.statistics.interrupted_reads == 3


def test_short_reads_are_accumulated():
    backend, client = make_backend(max_read=50)
    with backend:
        backend.open()
        assert backend.run_pass(vecsum) == PASS_SUM
    # 50 + 50 + 28 for each chunk
    assert client.count("read") > CHUNKS * 3


def test_partial_final_chunk():
    backend, _ = make_backend(truncate_at=CHUNK + CHUNK // 2)
    with backend:
        backend.open()
        with pytest.raises(ReadError) as err:
            backend.run_pass(vecsum)
    assert f"partial read of length {CHUNK // 2}" in str(err.value)


def test_read_failure():
    backend, _ = make_backend(fail_read_at=CHUNK * 2)
    with backend:
        backend.open()
        with pytest.raises(ReadError) as err:
            backend.run_pass(vecsum)
    assert err.value.operation == "read"


def test_run_opens_and_closes_when_not_open():
    backend, client = make_backend()
    results = list(backend.run(1, vecsum))
    assert results == [(0, PASS_SUM)]
    assert not backend.is_open
    assert client.count("disconnect") == 1
    # the length is still known once closed
    assert backend.length == CHUNK * CHUNKS


def test_length_before_open():
    backend, _ = make_backend()
    with pytest.raises(ReadError):
        backend.length


if __name__ == "__main__":  # pragma: no cover
    from tests import run_tests

    run_tests()
