# This file is part of setip. See LICENSE file for license information.
"""Run the external tools setip drives (ip, nmcli, netplan, systemctl...)."""

import collections
import logging
import os
import subprocess
import time
from typing import List, Optional, Sequence

LOG = logging.getLogger(__name__)

SubpResult = collections.namedtuple("SubpResult", ["stdout", "stderr"])


class ProcessExecutionError(IOError):
    """A command could not be started or exited with a disallowed code."""

    empty_attr = "-"

    def __init__(
        self,
        stdout=None,
        stderr=None,
        exit_code=None,
        cmd=None,
        reason=None,
    ):
        self.cmd = cmd or self.empty_attr
        self.exit_code = (
            exit_code if isinstance(exit_code, int) else self.empty_attr
        )
        self.stdout = self._field(stdout)
        self.stderr = self._field(stderr)
        self.reason = reason or self.empty_attr
        if reason:
            description = "Failed to run command."
        else:
            description = "Unexpected error while running command."
        lines = [
            description,
            "Command: %s" % (self.cmd,),
            "Exit code: %s" % self.exit_code,
            "Reason: %s" % self.reason,
            "Stdout: %s" % self.stdout,
            "Stderr: %s" % self.stderr,
        ]
        IOError.__init__(self, "\n".join(lines))

    def _field(self, text: Optional[str]) -> str:
        # continuation lines are indented under the "Stdout: " label
        if text is None:
            return self.empty_attr
        return text.rstrip("\n").replace("\n", "\n" + " " * 8)


def subp(
    args: Sequence[str],
    *,
    data=None,
    rcs=None,
    capture=True,
    update_env=None,
    timeout=None,
) -> SubpResult:
    """Run a command without a shell.

    :param args: the command and its arguments, [cmd, arg1, arg2...]
    :param data: text or bytes written to the command's stdin.
    :param rcs: exit codes treated as success, [0] by default.
    :param capture:
        collect and return stdout and stderr. When False both go straight
        to the terminal, which is what package installs want.
    :param update_env: variables added to the command's environment.
    :param timeout: seconds before the command is abandoned.

    :return: SubpResult(stdout, stderr), both None when not capturing.
    :raises: ProcessExecutionError
    """
    rcs = [0] if rcs is None else rcs
    env = os.environ.copy()
    if update_env:
        env.update(update_env)
    pipe = subprocess.PIPE if capture else None
    if data is None:
        stdin = subprocess.DEVNULL
    else:
        stdin = subprocess.PIPE
        if not isinstance(data, bytes):
            data = data.encode()

    cmd: List[str] = list(args)
    LOG.debug("Running %s (allowed exit codes %s)", cmd, rcs)
    started = time.monotonic()
    try:
        proc = subprocess.Popen(
            cmd, stdout=pipe, stderr=pipe, stdin=stdin, env=env
        )
        out, err = proc.communicate(data, timeout=timeout)
    except OSError as e:
        raise ProcessExecutionError(cmd=cmd, reason=e) from e
    except subprocess.TimeoutExpired as e:
        proc.kill()
        proc.communicate()
        raise ProcessExecutionError(
            cmd=cmd, reason="timed out after %s seconds" % timeout
        ) from e
    elapsed = time.monotonic() - started
    if elapsed > 1:
        LOG.debug("%s took %.3fs", cmd, elapsed)

    if isinstance(out, bytes):
        out = out.decode("utf-8", "replace")
    if isinstance(err, bytes):
        err = err.decode("utf-8", "replace")
    if proc.returncode not in rcs:
        raise ProcessExecutionError(
            stdout=out, stderr=err, exit_code=proc.returncode, cmd=cmd
        )
    return SubpResult(out, err)


def which(program: str, search: Optional[List[str]] = None) -> Optional[str]:
    """Return the path of an executable program, or None.

    A program containing a path separator is checked as is, PATH (or
    search) is not consulted.
    """
    if os.path.sep in program:
        return program if is_exe(program) else None
    if search is None:
        search = os.environ.get("PATH", "").split(os.pathsep)
    for path in search:
        candidate = os.path.join(os.path.abspath(path.strip('"')), program)
        if is_exe(candidate):
            return candidate
    return None


def is_exe(fpath: str) -> bool:
    return os.path.isfile(fpath) and os.access(fpath, os.X_OK)
