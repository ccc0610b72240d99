"""Write-with-permission for files inside the VS Code install directory."""

import os
import platform
import shlex
import time

from .config import DEFAULT_POLICY
from .errors import PermissionDenied, WriteFailed
from .util import log, replace_file, run_cmd, write_file


class SudoRunner:
    """Runs one command with elevated rights; returns True on success.

    Commands are argument lists and run without a shell. A plain string is
    only used for Windows shell builtins.
    """

    def __init__(self, system=None):
        self.system = system or platform.system()

    def exec(self, command):
        if self.system != "Windows":
            command = ["sudo", *command]
        shown = command if isinstance(command, str) else shlex.join(command)
        log(f"Running: {shown}")
        try:
            result = run_cmd(command, check=False)
        except OSError as e:
            log(f"Cannot run privileged command: {e}", "FAIL")
            return False
        if result.returncode != 0:
            log(f"Privileged command failed ({result.returncode}): {shown}", "FAIL")
            return False
        return True


def grant_commands(path, system):
    if system == "Windows":
        return [["takeown", "/f", path, "/a"], ["icacls", path, "/grant", "Users:F"]]
    if system == "Darwin":
        return [["chmod", "a+rwx", path]]
    return [["chmod", "666", path]]


def create_commands(path, system):
    if system == "Windows":
        return [f'echo. > "{path}"', ["icacls", path, "/grant", "Users:F"]]
    return [["touch", path], ["chmod", "666", path]]


def put_file(path, content):
    """Replace ``path`` atomically, or in place when its directory is read-only."""
    try:
        replace_file(path, content)
    except PermissionError:
        write_file(path, content)


class PermissionEscalator:
    def __init__(self, runner=None, system=None, policy=DEFAULT_POLICY, sleep=time.sleep):
        self.system = system or platform.system()
        self.runner = runner or SudoRunner(self.system)
        self.policy = policy
        self.sleep = sleep

    def write(self, path, content):
        self._write(path, content, grant_commands(path, self.system))

    def create(self, path, content):
        """Write a file that may not exist yet in a directory we cannot write."""
        self._write(path, content, create_commands(path, self.system))

    def _write(self, path, content, commands):
        try:
            put_file(path, content)
            return
        except OSError as e:
            log(f"Direct write to {os.path.basename(path)} failed ({e}); escalating", "WARN")

        for command in commands:
            if not self.runner.exec(command):
                # Still retry: an earlier command may have been enough.
                log(f"Escalation step failed: {command}", "WARN")

        if self.policy.write_retry_delay:
            self.sleep(self.policy.write_retry_delay)

        try:
            put_file(path, content)
        except PermissionError as e:
            raise PermissionDenied(f"No permission to write {path}.") from e
        except OSError as e:
            raise WriteFailed(f"Failed to write {path}: {e}") from e
        log(f"Wrote {os.path.basename(path)} after escalation", "OK")
