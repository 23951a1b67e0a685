"""Module for printing benchmark results to the console."""


def format_counts(counts) -> str:
    return f"Black Count: {counts.black} White Count: {counts.white}"


def print_device_run(result) -> None:
    """Print the counts and timings of one device run."""
    print(format_counts(result.counts))
    print(f"GPU load took: {result.setup_ms:.4f} ms")
    print(f"GPU processing took: {result.compute_ms:.4f} ms")
    print(f"total GPU time: {result.total_ms:.4f} ms")


def print_host_run(result) -> None:
    """Print the counts and timing of one host run."""
    print(format_counts(result.counts))
    print(f"CPU took: {result.compute_ms:.4f} ms")


def print_failure(result) -> None:
    """Print which path and phase of a run failed. No counts are printed."""
    error = result.error
    print(f"{result.path.upper()} {error.phase} failed: {error}")


def print_summary(summary) -> None:
    """Print whether the paths that ran agree on the counts."""
    if not summary.device or not summary.host:
        return
    if summary.agree:
        print("Device and host counts agree")
    else:
        print("WARNING: device and host counts differ")
