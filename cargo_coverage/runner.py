import enum
import logging

from .cargo import Cargo
from .config import RunConfig
from .coverage_collect import Grcov, open_report
from . import utils


class RunState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class CoverageRunner:
    """
    Drives one coverage run. Steps execute strictly one after another and
    the first non-zero exit status ends the run with that status.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.cargo = Cargo(config.project_root, config.env)
        self.grcov = Grcov(config.env)

        self.state = RunState.NOT_STARTED
        self.failed_step = None
        self.exit_code = None

    def collect_coverage(self) -> int:
        return self.grcov.collect(
            self.config.build_dir, self.config.project_root, self.config.report_dir
        )

    def open_report(self) -> int:
        return open_report(self.config.report_index, self.config.env)

    def steps(self):
        return [
            ("clean", self.cargo.clean),
            ("build", self.cargo.build),
            ("test", self.cargo.test),
            ("coverage", self.collect_coverage),
            ("open-report", self.open_report),
        ]

    def run(self) -> int:
        self.state = RunState.RUNNING

        for name, step in self.steps():
            with utils.timer(f"Step {name}"):
                ret = step()

            if ret != 0:
                logging.error("Step %s failed with exit status %d", name, ret)
                self.state = RunState.FAILED
                self.failed_step = name
                self.exit_code = ret
                return ret

        logging.info("Coverage report at %s", self.config.report_index)
        self.state = RunState.COMPLETED
        self.exit_code = 0
        return 0
