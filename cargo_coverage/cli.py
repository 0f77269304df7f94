from argparse import ArgumentParser

from .config import RunConfig
from .runner import CoverageRunner
from .utils import logging_setup


def build_parser() -> ArgumentParser:
    return ArgumentParser(
        prog="cargo-coverage-report",
        description="Clean, rebuild and test the cargo project in the current "
        "directory with coverage instrumentation, render an html report "
        "with grcov and open it.",
    )


def main(argv=None) -> int:
    parser = build_parser()
    parser.parse_args(argv)

    logging_setup()

    runner = CoverageRunner(RunConfig())
    return runner.run()

