import os
import logging

import toml

from .cargo import Cargo

CARGO_INCREMENTAL = "0"

# -Zprofile             gcov-style profiling instrumentation
# -Ccodegen-units=1     single codegen unit
# -Copt-level=0         no optimization
# -Clink-dead-code      keep unused functions so they show as uncovered
# -Coverflow-checks=off
# -Zno-landing-pads     no unwinding landing pads
RUSTFLAGS = " ".join(
    [
        "-Zprofile",
        "-Ccodegen-units=1",
        "-Copt-level=0",
        "-Clink-dead-code",
        "-Coverflow-checks=off",
        "-Zno-landing-pads",
    ]
)

INSTRUMENTATION_ENV = {
    "CARGO_INCREMENTAL": CARGO_INCREMENTAL,
    "RUSTFLAGS": RUSTFLAGS,
}

DEFAULT_TARGET_DIR = "target"
BUILD_PROFILE = "debug"
REPORT_SUBDIR = "coverage"
REPORT_ENTRY = "index.html"

# Cargo reads only the first of these present in a .cargo directory.
CARGO_CONFIG_NAMES = ["config", "config.toml"]


def child_env(base=None) -> dict:
    """Environment handed to every spawned step."""
    if base is None:
        base = os.environ
    env = dict(base)
    env.update(INSTRUMENTATION_ENV)
    return env


def _load_toml(path):
    try:
        with open(path, "r") as f:
            return toml.load(f)
    except FileNotFoundError:
        return None
    except (OSError, toml.TomlDecodeError) as exc:
        logging.warning("Ignoring unreadable %s: %s", path, exc)
        return None


def _ancestors(path):
    while True:
        yield path
        parent = os.path.dirname(path)
        if parent == path:
            return
        path = parent


def _cargo_config_file(directory):
    for name in CARGO_CONFIG_NAMES:
        path = os.path.join(directory, ".cargo", name)
        if os.path.isfile(path):
            return path
    return None


def _target_dir_setting(path):
    conf = _load_toml(path)
    if conf is None:
        return None

    try:
        value = conf["build"]["target-dir"]
    except (KeyError, TypeError):
        return None

    if not isinstance(value, str):
        logging.warning("Ignoring non-string build.target-dir in %s: %r", path, value)
        return None
    return value


def _configured_target_dir(project_root):
    # The config closest to the project wins. A relative target-dir is
    # relative to the directory holding `.cargo`.
    for directory in _ancestors(project_root):
        path = _cargo_config_file(directory)
        if path is None:
            continue
        value = _target_dir_setting(path)
        if value is not None:
            return os.path.join(directory, value)
    return None


def _workspace_root(project_root):
    for directory in _ancestors(project_root):
        manifest = _load_toml(os.path.join(directory, "Cargo.toml"))
        if manifest is not None and "workspace" in manifest:
            return directory
    return project_root


def guess_target_dir(project_root, env) -> str:
    """
    Resolve the target directory from cargo's inputs without cargo:
    CARGO_TARGET_DIR, CARGO_BUILD_TARGET_DIR, `build.target-dir` from
    .cargo/config files of the project and its parents, then `target`
    under the workspace root.
    """
    target_dir = (
        env.get("CARGO_TARGET_DIR")
        or env.get("CARGO_BUILD_TARGET_DIR")
        or _configured_target_dir(project_root)
    )
    if target_dir:
        return os.path.normpath(os.path.join(project_root, target_dir))

    return os.path.join(_workspace_root(project_root), DEFAULT_TARGET_DIR)


def locate_target_dir(project_root, env=None) -> str:
    """Ask cargo where it builds; fall back to reading its config ourselves."""
    if env is None:
        env = os.environ

    metadata = Cargo(project_root, env).metadata()
    target_dir = None
    if isinstance(metadata, dict):
        target_dir = metadata.get("target_directory")

    if isinstance(target_dir, str):
        return os.path.normpath(target_dir)

    logging.warning("cargo metadata has no target directory, reading cargo config")
    return guess_target_dir(project_root, env)


class RunConfig:
    """
    Everything one coverage run needs, fixed at construction:
        - project root, which cargo builds and grcov reads sources from
        - build output directory handed to grcov as its data source
        - where the html report goes and its entry page
        - environment for child processes
    """

    def __init__(self, project_root=None, base_env=None):
        if project_root is None:
            project_root = os.getcwd()

        self.__project_root = os.path.abspath(project_root)
        self.__env = child_env(base_env)
        self.__build_dir = os.path.join(
            locate_target_dir(self.__project_root, self.__env), BUILD_PROFILE
        )

        logging.debug(
            "Project root %s, build dir %s", self.__project_root, self.__build_dir
        )

    @property
    def project_root(self):
        return self.__project_root

    @property
    def build_dir(self):
        return self.__build_dir

    @property
    def report_dir(self):
        return os.path.join(self.__build_dir, REPORT_SUBDIR)

    @property
    def report_index(self):
        return os.path.join(self.report_dir, REPORT_ENTRY)

    @property
    def env(self) -> dict:
        # Callers get a copy so the run's environment can't drift.
        return dict(self.__env)
