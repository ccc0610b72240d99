"""Install / uninstall orchestration for the workbench patch.

Every mutation of the workbench file happens here, under the target's lock,
on content read fresh inside that lock.
"""

import os
from dataclasses import dataclass
from enum import Enum

from . import __version__, block, locking
from .backup import BackupManager
from .config import DEFAULT_POLICY, EXT_NAME, LEGACY_EXT_NAMES
from .errors import CorruptionUnrecoverable, InstallFailed, PatchError, TargetNotFound, WriteFailed
from .escalate import PermissionEscalator
from .util import log, read_file


class State(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    LOCKING = "locking"
    READING = "reading"
    RECOVERING = "recovering"
    DIFFING = "diffing"
    BACKING_UP = "backing_up"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ApplyResult:
    ok: bool
    message: str
    changed: bool = False
    restart_required: bool = False


class PatchApplier:
    def __init__(self, target, payload_provider, escalator=None, policy=DEFAULT_POLICY,
                 lock_dir=None, strict_backup=False, name=EXT_NAME, legacy=LEGACY_EXT_NAMES,
                 version=__version__, dry_run=False):
        self.target = target
        self.payload_provider = payload_provider
        self.policy = policy
        self.escalator = escalator or PermissionEscalator(policy=policy)
        self.backups = BackupManager(self.escalator)
        self.lock_path = target.lock_path(lock_dir)
        self.strict_backup = strict_backup
        self.name = name
        self.legacy = tuple(legacy)
        self.version = version
        self.dry_run = dry_run
        self.state = State.IDLE
        self._busy = False

    def _enter(self, state):
        self.state = state
        log(f"[{state.value}] {self.target.name}")

    # ─── Public operations ──────────────────────────────────────────────────

    def install(self):
        return self._run(self._install)

    def uninstall(self):
        return self._run(self._uninstall)

    def _run(self, operation):
        if self._busy:
            log("Patch already in progress in this process", "SKIP")
            return ApplyResult(ok=False, message="A patch operation is already running.")
        self._busy = True
        try:
            result = operation()
            self.state = State.DONE
            return result
        except PatchError as e:
            self.state = State.FAILED
            log(e.user_message, "FAIL")
            return ApplyResult(ok=False, message=e.user_message)
        except OSError as e:
            self.state = State.FAILED
            log(f"File operation failed: {e}", "FAIL")
            return ApplyResult(ok=False, message=f"Installation failed: {e}")
        finally:
            self._busy = False

    # ─── Steps ──────────────────────────────────────────────────────────────

    def _resolve(self):
        self._enter(State.RESOLVING)
        if not self.target.exists():
            raise TargetNotFound(f"Core file not found: {self.target.asset_path}")

    def _locked(self, body):
        self._enter(State.LOCKING)
        handle = locking.acquire(self.lock_path, self.policy)
        try:
            self._enter(State.READING)
            return body(read_file(self.target.asset_path))
        finally:
            locking.release(handle)

    def _install(self):
        self._resolve()
        return self._locked(self._install_locked)

    def _install_locked(self, current):
        script, _urls = self.payload_provider()
        try:
            new_block = block.build(script, self.name, self.version)
        except ValueError as e:
            raise InstallFailed(str(e)) from e

        if self._is_settled(current, new_block):
            log("Patch already applied and up to date.", "SKIP")
            return ApplyResult(ok=True, message="Mascot patch is already up to date.")

        base = current
        reason = block.corruption_reason(current, (self.name,) + self.legacy)
        if reason:
            self._enter(State.RECOVERING)
            log(f"Workbench file looks corrupted: {reason}", "WARN")
            if not self.backups.exists(self.target):
                raise CorruptionUnrecoverable(
                    f"{self.target.js} has damaged patch markers ({reason}) and no backup exists."
                )
            base = self.backups.read(self.target)
            log(f"Recovering from backup {self.target.backup_path}", "OK")

        self._enter(State.DIFFING)
        clean = block.strip_all(base, self.name, self.legacy)
        first_run = not self.backups.exists(self.target)

        if self.dry_run:
            log(f"Would write {self.target.js} (first run: {first_run})", "SKIP")
            return ApplyResult(ok=True, message="Dry run: workbench file would be patched.")

        if first_run:
            self._enter(State.BACKING_UP)
            try:
                self.backups.ensure(self.target, clean)
            except InstallFailed as e:
                if self.strict_backup:
                    raise WriteFailed(f"Backup failed, not patching: {e}") from e
                log(f"Backup failed, continuing without one: {e}", "WARN")

        self._enter(State.WRITING)
        self.escalator.write(self.target.asset_path, block.insert(clean, new_block))
        log(f"Patched {self.target.js}", "OK")
        return ApplyResult(ok=True, message="Mascot patch installed.", changed=True, restart_required=True)

    def _is_settled(self, content, new_block):
        if not block.contains_current(content, new_block):
            return False
        if len(block.find_blocks(content, self.name)) != 1:
            return False
        if any(block.find_blocks(content, old) for old in self.legacy):
            return False
        return not block.is_corrupted(content, (self.name,) + self.legacy)

    def _uninstall(self):
        self._resolve()
        return self._locked(self._uninstall_locked)

    def _uninstall_locked(self, current):
        self._enter(State.DIFFING)
        if not block.find_blocks(current, self.name):
            log("No mascot patch present", "SKIP")
            return ApplyResult(ok=True, message="Mascot patch is not installed.")

        if self.dry_run:
            log(f"Would remove patch from {self.target.js}", "SKIP")
            return ApplyResult(ok=True, message="Dry run: patch would be removed.")

        self._enter(State.WRITING)
        self.escalator.write(self.target.asset_path, block.strip(current, self.name))
        log(f"Removed patch from {self.target.js}", "OK")
        return ApplyResult(ok=True, message="Mascot patch removed.", changed=True, restart_required=True)


def status(target, name=EXT_NAME, legacy=LEGACY_EXT_NAMES):
    """Summarize the patch state of ``target`` without locking."""
    if not target.exists():
        return {"target": target.name, "path": target.asset_path, "exists": False}
    content = read_file(target.asset_path)
    return {
        "target": target.name,
        "path": target.asset_path,
        "exists": True,
        "blocks": len(block.find_blocks(content, name)),
        "legacy_blocks": sum(len(block.find_blocks(content, old)) for old in legacy),
        "corruption": block.corruption_reason(content, (name,) + tuple(legacy)),
        "backup": os.path.isfile(target.backup_path),
    }
