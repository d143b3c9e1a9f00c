import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pytest

from tests.memory_client import MemoryFileSystemClient
from tests.tools import doubles
from vecsum.compute import vecsum
from vecsum.config import Configuration
from vecsum.connectors import ZeroCopyBackend
from vecsum.constants import ZCR_READ_CHUNK_SIZE
from vecsum.constants import BackendType
from vecsum.exceptions import ReadError

CHUNK = 256
CHUNKS = 4
PATH = "/bench/doubles.bin"
PASS_SUM = float(CHUNK * CHUNKS // 8)


def make_backend(**kwargs):
    data = doubles(CHUNK * CHUNKS // 8).tobytes()
    client = MemoryFileSystemClient({PATH: data}, **kwargs)
    configuration = Configuration(path=PATH, passes=2, backend=BackendType.ZEROCOPY)
    backend = ZeroCopyBackend(configuration=configuration, client=client, chunk_size=CHUNK)
    return backend, client


def test_default_chunk_size():
    configuration = Configuration(path=PATH, passes=1, backend=BackendType.ZEROCOPY)
    backend = ZeroCopyBackend(configuration=configuration, client=MemoryFileSystemClient({}))
    assert backend.chunk_size == ZCR_READ_CHUNK_SIZE
    assert backend.name == "zerocopy"


def test_every_buffer_is_released():
    backend, client = make_backend()
    with backend:
        backend.open()
        assert backend.options.skip_checksum
        results = list(backend.run(2, vecsum))
    assert results == [(0, PASS_SUM), (1, PASS_SUM)]
    assert client.outstanding == []
    assert len(client.released) == 2 * CHUNKS
    # one extra request per pass finds the end of the file
    assert client.count("zero_copy_read") == 2 * (CHUNKS + 1)
    assert backend.statistics.zero_copy_bytes_read == 2 * CHUNK * CHUNKS
    assert backend.options is None


def test_buffer_released_when_consumer_stops_early():
    backend, client = make_backend()
    with backend:
        backend.open()
        chunks = backend.chunks()
        first = next(chunks)
        assert first.sum() == CHUNK // 8
        del first
        chunks.close()
        assert client.outstanding == []
    assert len(client.released) == 1


def test_short_buffer():
    backend, client = make_backend(short_zero_copy_at=CHUNK * 2)
    with backend:
        backend.open()
        with pytest.raises(ReadError) as err:
            backend.run_pass(vecsum)
    assert "partial read" in str(err.value)
    assert client.outstanding == []
    assert len(client.released) == 3


def test_read_failure():
    backend, client = make_backend(fail_read_at=CHUNK)
    with backend:
        backend.open()
        with pytest.raises(ReadError) as err:
            backend.run_pass(vecsum)
    assert err.value.operation == "zero_copy_read"
    assert client.outstanding == []


def test_end_of_file():
    backend, _ = make_backend()
    with backend:
        backend.open()
        for _ in range(CHUNKS):
            assert backend.next_chunk() is not None
        assert backend.next_chunk() is None


if __name__ == "__main__":  # pragma: no cover
    from tests import run_tests

    run_tests()
