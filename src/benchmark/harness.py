"""Module for timing the device and host counters against each other."""

import logging
import time

from dataclasses import dataclass, field
from typing import Optional
from benchmark import report
from counting.abstract import CounterPair
from counting.errors import ColorCountError

logger = logging.getLogger(__name__)

DEFAULT_REPETITIONS = 2


@dataclass(frozen=True)
class RunResult:
    """Outcome of one timed repetition."""

    path: str
    repetition: int
    counts: Optional[CounterPair] = None
    setup_ms: float = 0.0
    compute_ms: float = 0.0
    error: Optional[ColorCountError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_ms(self) -> float:
        return self.setup_ms + self.compute_ms


@dataclass
class BenchmarkSummary:
    """Results of both paths for one image."""

    device: list = field(default_factory=list)
    host: list = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(not result.ok for result in self.device + self.host)

    @property
    def agree(self) -> bool:
        """Whether every successful run reported the same counts."""
        counts = {result.counts for result in self.device + self.host if result.ok}
        return len(counts) <= 1


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _check_repetitions(repetitions: int) -> None:
    if repetitions < 0:
        raise ValueError(f"repetitions must not be negative, got {repetitions}")


class Harness:
    """Runs repeated, timed counts of one image on each path."""

    def __init__(self, image, device=None, host=None) -> None:
        """Initialize Harness class.

        Args:
            image (Image): Image counted by every run.
            device (Device): Device counter, the device path is skipped when
                omitted.
            host (Counter): Host counter, the host path is skipped when
                omitted.
        """
        self.image = image
        self.device = device
        self.host = host

    def run_device(self, repetitions: int = DEFAULT_REPETITIONS) -> list:
        """Time the device path, setup separately from compute and readback.

        A failed repetition is reported and ends the device measurement.

        Args:
            repetitions (int): Number of runs.

        Returns:
            list: One ``RunResult`` per attempted run.
        """
        _check_repetitions(repetitions)
        results = []

        for repetition in range(repetitions):
            setup_ms = compute_ms = 0.0
            load_start = time.perf_counter()
            try:
                with self.device.session(self.image) as session:
                    setup_ms = _elapsed_ms(load_start)

                    start = time.perf_counter()
                    counts = self.device.count(session)
                    compute_ms = _elapsed_ms(start)
            except ColorCountError as exc:
                logger.debug("Device run %d failed", repetition, exc_info=True)
                result = RunResult("device", repetition, None, setup_ms, compute_ms, exc)
                results.append(result)
                report.print_failure(result)
                break

            result = RunResult("device", repetition, counts, setup_ms, compute_ms)
            results.append(result)
            report.print_device_run(result)

        return results

    def run_host(self, repetitions: int = DEFAULT_REPETITIONS) -> list:
        """Time the host path.

        Args:
            repetitions (int): Number of runs.

        Returns:
            list: One ``RunResult`` per attempted run.
        """
        _check_repetitions(repetitions)
        results = []

        for repetition in range(repetitions):
            start = time.perf_counter()
            try:
                counts = self.host.run(self.image)
            except ColorCountError as exc:
                logger.debug("Host run %d failed", repetition, exc_info=True)
                result = RunResult("host", repetition, None, 0.0, _elapsed_ms(start), exc)
                results.append(result)
                report.print_failure(result)
                break

            result = RunResult("host", repetition, counts, 0.0, _elapsed_ms(start))
            results.append(result)
            report.print_host_run(result)

        return results

    def run(self, device_runs: int = DEFAULT_REPETITIONS, host_runs: int = DEFAULT_REPETITIONS) -> BenchmarkSummary:
        """Run the device path, then the host path, and compare their counts.

        Args:
            device_runs (int): Repetitions of the device path.
            host_runs (int): Repetitions of the host path.

        Returns:
            BenchmarkSummary: Every run of both paths.
        """
        summary = BenchmarkSummary()
        if self.device is not None:
            summary.device = self.run_device(device_runs)
        if self.host is not None:
            summary.host = self.run_host(host_runs)

        report.print_summary(summary)
        return summary
