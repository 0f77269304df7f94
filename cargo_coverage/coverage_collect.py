import platform

from .command import Command
from . import utils

GRCOV_BIN = "grcov"


class GrcovParam(Command):
    def source_dir(self, source_dir):
        return self.set_param("s", source_dir, prefix="-")

    def output_type(self, output_type):
        return self.set_param("t", output_type, prefix="-")

    def output_path(self, output_path):
        return self.set_param("o", output_path, prefix="-")

    def llvm(self):
        return self.set_flags("llvm")

    def branch(self):
        return self.set_flags("branch")

    def ignore_not_existing(self):
        return self.set_flags("ignore-not-existing")


class Grcov:
    def __init__(self, env, grcov_bin=GRCOV_BIN):
        self.env = env
        self.grcov_bin = grcov_bin

    def command(self, build_dir, source_dir, output_dir) -> GrcovParam:
        """
        Example:
            grcov ./target/debug/ -s . -t html --llvm --branch \
                --ignore-not-existing -o ./target/debug/coverage/
        """
        cmd = GrcovParam(self.grcov_bin)
        cmd.add_positional(build_dir)
        cmd.source_dir(source_dir).output_type("html").output_path(output_dir)
        cmd.llvm().branch().ignore_not_existing()
        return cmd

    def collect(self, build_dir, source_dir, output_dir) -> int:
        cmd = self.command(build_dir, source_dir, output_dir)
        return utils.spawn(cmd.argv(), cwd=source_dir, env=self.env)


def opener_command(path, system=None) -> list:
    if system is None:
        system = platform.system()

    if system == "Darwin":
        return ["open", path]
    elif system == "Windows":
        # `start` is a cmd builtin; the empty string is the window title.
        return ["cmd", "/c", "start", "", path]
    else:
        return ["xdg-open", path]


def open_report(path, env) -> int:
    return utils.spawn(opener_command(path), env=env)
