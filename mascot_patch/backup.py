"""One-time pristine snapshot of the workbench file."""

import os

from .errors import InstallFailed
from .util import log, read_file


class BackupManager:
    def __init__(self, escalator):
        self.escalator = escalator

    def exists(self, target):
        return os.path.isfile(target.backup_path)

    def read(self, target):
        return read_file(target.backup_path)

    def ensure(self, target, content):
        """Persist ``content`` as the backup unless one already exists.

        ``content`` must already be stripped of every patch block. Returns True
        when a snapshot was written, False when one was already there. Raises
        ``InstallFailed`` if the snapshot cannot be written even after escalation.
        """
        if self.exists(target):
            log("Backup already exists", "SKIP")
            return False

        log(f"First time setup: backing up {target.js}...")
        self.escalator.create(target.backup_path, content)
        log(f"Backup saved to {target.backup_path}", "OK")
        return True

    def invalidate(self, target):
        """Drop the snapshot, e.g. after VS Code replaced the workbench file."""
        if not self.exists(target):
            return False
        try:
            os.remove(target.backup_path)
        except OSError as e:
            raise InstallFailed(f"Cannot remove backup {target.backup_path}: {e}") from e
        log(f"Removed backup {target.backup_path}", "OK")
        return True
