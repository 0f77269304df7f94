import os
import json
import subprocess
import logging
import pytest

from cargo_coverage import utils
from cargo_coverage.config import RunConfig

utils.logging_setup()


def step_of(cmd):
    """Name of the runner step a spawned argv belongs to."""
    program = os.path.basename(cmd[0])
    if program == "cargo":
        return cmd[1]
    if program == "grcov":
        return "coverage"
    return "open-report"


class FakeProcess:
    def __init__(self, recorder, cmd, kwargs):
        self.recorder = recorder
        self.cmd = cmd
        self.kwargs = kwargs
        self.returncode = None

    def wait(self):
        self.returncode = self.recorder.returncodes.get(step_of(self.cmd), 0)
        return self.returncode


class PopenRecorder:
    def __init__(self):
        self.calls = []
        self.returncodes = {}
        self.unlaunchable = {}

    def fail(self, step, returncode):
        self.returncodes[step] = returncode

    def refuse(self, step, exc):
        self.unlaunchable[step] = exc

    def __call__(self, cmd, **kwargs):
        step = step_of(cmd)
        if step in self.unlaunchable:
            raise self.unlaunchable[step]

        p = FakeProcess(self, cmd, kwargs)
        self.calls.append(p)
        return p

    @property
    def steps(self):
        return [step_of(p.cmd) for p in self.calls]

    def call_for(self, step):
        for p in self.calls:
            if step_of(p.cmd) == step:
                return p
        return None


@pytest.fixture()
def fake_popen(monkeypatch):
    """No real process is ever spawned; every Popen is recorded instead."""
    recorder = PopenRecorder()
    monkeypatch.setattr(utils.subprocess, "Popen", recorder)
    yield recorder


class MetadataRecorder:
    """
    Stands in for `subprocess.check_output`, answering `cargo metadata`.
    By default cargo reports `<cwd>/target`.
    """

    def __init__(self):
        self.calls = []
        self.target_directory = None
        self.output = None
        self.returncode = 0

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.returncode != 0:
            raise subprocess.CalledProcessError(self.returncode, cmd, output=b"")
        if self.output is not None:
            return self.output

        target = self.target_directory
        if target is None:
            target = os.path.join(kwargs["cwd"], "target")
        return json.dumps(
            {
                "packages": [],
                "workspace_root": kwargs["cwd"],
                "target_directory": target,
            }
        ).encode()


@pytest.fixture(autouse=True)
def cargo_metadata(monkeypatch):
    recorder = MetadataRecorder()
    monkeypatch.setattr(utils.subprocess, "check_output", recorder)
    yield recorder


@pytest.fixture()
def cargo_project(tmp_path, monkeypatch):
    monkeypatch.delenv("CARGO_TARGET_DIR", raising=False)
    monkeypatch.delenv("CARGO_BUILD_TARGET_DIR", raising=False)
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n')
    logging.info("*** Testing case %s ***", os.environ.get("PYTEST_CURRENT_TEST"))
    yield tmp_path


@pytest.fixture()
def run_config(cargo_project):
    return RunConfig(str(cargo_project), base_env={"PATH": "/usr/bin"})
