"""Main module for the application."""

import argparse
import logging
import sys

from benchmark.harness import DEFAULT_REPETITIONS, Harness
from counting.abstract import get_counter
from counting.accelerator import THREADS_PER_BLOCK
from counting.errors import DecodeError, DeviceError
from counting.threaded import DEFAULT_THREADS
from loader.service import Loader

HOST_COUNTERS = ("standard", "threaded")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Count black and white pixels of an image on the GPU and on the CPU.'
    )
    parser.add_argument('image', nargs='?', default='./test.jpeg', help='the source image')
    parser.add_argument('--device-runs', type=int, default=DEFAULT_REPETITIONS, help='number of GPU runs')
    parser.add_argument('--host-runs', type=int, default=DEFAULT_REPETITIONS, help='number of CPU runs')
    parser.add_argument('--threads', type=int, default=DEFAULT_THREADS, help='number of CPU threads')
    parser.add_argument('--host-counter', choices=HOST_COUNTERS, default='threaded', help='CPU counter to time')
    parser.add_argument('--tb', type=int, default=THREADS_PER_BLOCK, help='size of a GPU thread block')
    parser.add_argument('--host-only', action='store_true', help='skip the GPU runs')
    parser.add_argument('--verbose', action='store_true', help='log debug messages')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    print("Loading Image")
    try:
        image = Loader.load_rgb_image(args.image)
    except DecodeError as exc:
        print(exc)
        return 1
    print("Done Loading Image")

    device = None
    if not args.host_only:
        try:
            device = get_counter("device", num_threads=args.threads, threads_per_block=args.tb)
        except DeviceError as exc:
            print(f"{exc}, running on the CPU only")

    host_options = {"num_threads": args.threads} if args.host_counter == "threaded" else {}
    host = get_counter(args.host_counter, **host_options)
    harness = Harness(image, device=device, host=host)
    summary = harness.run(device_runs=args.device_runs, host_runs=args.host_runs)

    return 1 if summary.failed or not summary.agree else 0


if __name__ == "__main__":
    sys.exit(main())
