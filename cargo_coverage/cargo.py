import json
import logging

from .command import Command
from . import utils

CARGO_BIN = "cargo"


class Cargo:
    def __init__(self, project_root, env, cargo_bin=CARGO_BIN):
        self.project_root = project_root
        self.env = env
        self.cargo_bin = cargo_bin

    def __subcommand(self, subcommand) -> int:
        cmd = Command(self.cargo_bin).set_subcommand(subcommand)
        return utils.spawn(cmd.argv(), cwd=self.project_root, env=self.env)

    def metadata(self):
        """
        Workspace layout as cargo resolves it, or None if cargo can't tell.
        `target_directory` already accounts for workspaces, .cargo config
        files and CARGO_TARGET_DIR / CARGO_BUILD_TARGET_DIR.
        """
        cmd = (
            Command(self.cargo_bin)
            .set_subcommand("metadata")
            .set_param("format-version", 1)
            .set_flags("no-deps")
        )
        ok, out = utils.execute(cmd.argv(), cwd=self.project_root, env=self.env)
        if not ok:
            return None

        try:
            return json.loads(out)
        except ValueError as exc:
            logging.warning("Unparsable cargo metadata output: %s", exc)
            return None

    def clean(self) -> int:
        """Remove prior build artifacts, stale coverage data included."""
        return self.__subcommand("clean")

    def build(self) -> int:
        return self.__subcommand("build")

    def test(self) -> int:
        """Instrumented test binaries drop .gcda files into the build dir."""
        return self.__subcommand("test")
