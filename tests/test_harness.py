import pytest

from conftest import FakeAccelerator
from benchmark import report
from benchmark.harness import BenchmarkSummary, Harness, RunResult
from counting.abstract import CounterPair, get_counter
from counting.device import Device
from counting.errors import DeviceLaunchError, HostCountError
from counting.standard import Standard
from counting.threaded import Threaded


@pytest.fixture
def harness(random_image):
    device = Device(num_threads=2, threads_per_block=64)
    return Harness(random_image, device=device, host=Threaded(num_threads=3))


def test_both_paths_agree(harness, random_image, capsys):
    summary = harness.run(device_runs=2, host_runs=2)

    expected = Standard().run(random_image)
    assert [result.counts for result in summary.device] == [expected, expected]
    assert [result.counts for result in summary.host] == [expected, expected]
    assert summary.agree
    assert not summary.failed

    output = capsys.readouterr().out
    assert output.count(f"Black Count: {expected.black} White Count: {expected.white}") == 4
    assert output.count("GPU load took:") == 2
    assert output.count("GPU processing took:") == 2
    assert output.count("total GPU time:") == 2
    assert output.count("CPU took:") == 2
    assert "Device and host counts agree" in output


def test_device_timings_are_split(harness):
    result = harness.run_device(1)[0]

    assert result.path == "device"
    assert result.setup_ms > 0
    assert result.compute_ms > 0
    assert result.total_ms == result.setup_ms + result.compute_ms


def test_failed_device_run_stops_the_path(random_image, capsys):
    device = Device(accelerator=FakeAccelerator(fail_on="launch"))
    harness = Harness(random_image, device=device, host=Threaded())

    summary = harness.run(device_runs=3, host_runs=1)

    assert len(summary.device) == 1
    failed = summary.device[0]
    assert not failed.ok
    assert failed.counts is None
    assert isinstance(failed.error, DeviceLaunchError)
    assert summary.failed

    output = capsys.readouterr().out
    assert "DEVICE compute failed: launch failed" in output
    assert "GPU processing took:" not in output
    assert output.count("Black Count:") == 1


def test_failed_runs_do_not_count_against_agreement():
    summary = BenchmarkSummary(
        device=[RunResult("device", 0, error=DeviceLaunchError("boom"))],
        host=[RunResult("host", 0, CounterPair(1, 2)), RunResult("host", 1, CounterPair(1, 2))],
    )

    assert summary.agree
    assert summary.failed


def test_disagreement_is_reported(capsys):
    summary = BenchmarkSummary(
        device=[RunResult("device", 0, CounterPair(1, 2))],
        host=[RunResult("host", 0, CounterPair(1, 3))],
    )

    assert not summary.agree

    report.print_summary(summary)
    assert "differ" in capsys.readouterr().out


def test_standard_host_counter(random_image, capsys):
    harness = Harness(random_image, host=get_counter("standard"))

    summary = harness.run(device_runs=0, host_runs=1)

    assert summary.host[0].counts == Standard().run(random_image)
    assert not summary.failed
    assert capsys.readouterr().out.count("CPU took:") == 1


def test_failed_host_run_stops_the_path(random_image, monkeypatch, capsys):
    def fail(pixels):
        raise MemoryError("no room for the row")

    monkeypatch.setattr("counting.threaded.count_extremes", fail)
    harness = Harness(random_image, host=Threaded(num_threads=2))

    summary = harness.run(device_runs=0, host_runs=3)

    assert len(summary.host) == 1
    failed = summary.host[0]
    assert failed.counts is None
    assert isinstance(failed.error, HostCountError)
    assert isinstance(failed.error.__cause__, MemoryError)

    output = capsys.readouterr().out
    assert "HOST compute failed: Counting rows" in output
    assert "Black Count:" not in output


def test_host_only(random_image):
    summary = Harness(random_image, host=Threaded(num_threads=2)).run(device_runs=2, host_runs=3)

    assert summary.device == []
    assert len(summary.host) == 3


def test_zero_repetitions(harness):
    assert harness.run_device(0) == []
    assert harness.run_host(0) == []


def test_negative_repetitions(harness):
    with pytest.raises(ValueError):
        harness.run_host(-1)
    with pytest.raises(ValueError):
        harness.run_device(-1)
