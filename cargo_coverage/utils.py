import subprocess
import logging
import sys
import os
import contextlib
import datetime

# Shell conventions for a command that could not be started.
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def logging_setup(logging_stream=sys.stderr, root=None):
    if root is None:
        root = logging.getLogger()

    if root.hasHandlers():
        return

    verbose = False
    try:
        if os.environ["COVERAGE_REPORT_VERBOSE"] == "YES":
            verbose = True
    except KeyError as _:
        pass

    handler = logging.StreamHandler(logging_stream)

    if verbose:
        root.setLevel(logging.DEBUG)
        handler.setLevel(logging.DEBUG)
    else:
        root.setLevel(logging.INFO)
        handler.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s "
        "[%(module)s - %(lineno)s:%(funcName)s] "
        "- %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def execute(cmd, **kwargs):
    """
    Run `cmd` and capture its stdout. stderr is left to the caller, so
    tool warnings don't end up mixed into parsed output.
    """
    logging.info("Executing command: %s", " ".join(cmd))

    try:
        output = subprocess.check_output(cmd, **kwargs)
    except subprocess.CalledProcessError as exc:
        logging.error("Command: %s\nReturn code: %d", " ".join(cmd), exc.returncode)
        return False, ""
    except OSError as exc:
        logging.error("Command can't be started: %s (%s)", cmd[0], exc)
        return False, ""

    return True, output.decode("utf-8")


def run(cmd, **kwargs):
    logging.info("Executing command: %s", " ".join(cmd))

    popen_obj = subprocess.Popen(cmd, **kwargs)
    popen_obj.wait()
    return popen_obj.returncode, popen_obj


def exit_status(returncode: int) -> int:
    """
    Popen reports a child killed by signal N as -N. Map it to 128 + N like
    a shell does so it can be used as a process exit code.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def spawn(cmd, **kwargs) -> int:
    """
    Run `cmd` to completion with inherited stdout/stderr and return its
    exit status. A program which can't be started is reported the way a
    shell would: 127 when missing, 126 when not executable.
    """
    try:
        ret, _ = run(cmd, **kwargs)
    except FileNotFoundError as exc:
        logging.error("Command not found: %s (%s)", cmd[0], exc)
        return EXIT_NOT_FOUND
    except PermissionError as exc:
        logging.error("Command not executable: %s (%s)", cmd[0], exc)
        return EXIT_NOT_EXECUTABLE

    return exit_status(ret)


def get_current_time():
    return datetime.datetime.now()


def delta_time(t_end, t_start):
    return (t_end - t_start).total_seconds()


@contextlib.contextmanager
def timer(slogan):
    start = get_current_time()
    try:
        yield
    finally:
        end = get_current_time()
        logging.info("%s, Takes time %.3f seconds", slogan, delta_time(end, start))
