"""Property-based tests using Hypothesis."""
import pytest
from hypothesis import given, settings, HealthCheck
import hypothesis.strategies as st

from diskio import FlushLoop, Sample, WriteError, make_block
from diskio.metrics import summarize, throughput_mbps
from tests.helpers.faulty import FaultyFile

_fixture_ok = settings(
    max_examples=25,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


@given(block_size=st.integers(min_value=1, max_value=8192),
       iterations=st.integers(min_value=0, max_value=20))
@_fixture_ok
def test_bytes_equal_block_size_times_iterations(tmp_path_factory, block_size, iterations):
    """Sum of per-iteration bytes is block_size * iterations."""
    path = tmp_path_factory.mktemp("prop") / "f.data"
    with open(path, "xb", buffering=0) as f:
        samples = FlushLoop(f, make_block(block_size), iterations=iterations).run()

    assert len(samples) == iterations
    assert sum(s.bytes_written for s in samples) == block_size * iterations
    assert path.stat().st_size == block_size * iterations


@given(iterations=st.integers(min_value=1, max_value=15), data=st.data())
@_fixture_ok
def test_write_failure_on_n_keeps_n_minus_one(tmp_path_factory, iterations, data):
    """A write failure on iteration N leaves exactly N-1 samples."""
    fail_on = data.draw(st.integers(min_value=1, max_value=iterations))
    path = tmp_path_factory.mktemp("prop") / "f.data"
    with open(path, "xb", buffering=0) as f:
        loop = FlushLoop(FaultyFile(f, fail_write_on=fail_on), make_block(32),
                         iterations=iterations)
        with pytest.raises(WriteError):
            loop.run()

    assert len(loop.samples) == fail_on - 1


_durations = st.floats(min_value=1e-6, max_value=1.0, allow_nan=False)


@given(st.lists(st.tuples(_durations, _durations), min_size=1, max_size=50),
       st.integers(min_value=1, max_value=1 << 20))
@settings(max_examples=50)
def test_throughput_is_bytes_over_duration(durations, block_size):
    """Throughput from the sample log is total bytes / total duration."""
    samples = [
        Sample(timestamp=float(i), write_duration=w, sync_duration=s,
               bytes_written=block_size)
        for i, (w, s) in enumerate(durations)
    ]
    total = block_size * len(samples)
    elapsed = sum(w + s for w, s in durations)

    expected = total / (1024 * 1024) / elapsed
    assert throughput_mbps(samples) == pytest.approx(expected)
    assert summarize([samples], "p", block_size, total).throughput_mbps == pytest.approx(expected)
