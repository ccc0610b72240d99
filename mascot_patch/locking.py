"""Cross-process lock around workbench mutations.

The lock file itself is only a well-known anchor. Ownership is the sibling
``<lockfile>.lock`` directory: ``mkdir`` either creates it or fails, on every
platform, so two processes can never both believe they hold it. Its mtime is
the holder's heartbeat: a background thread touches it every half staleness
period, and a directory whose mtime falls behind the threshold is presumed
abandoned.
"""

import os
import shutil
import threading
import time
import uuid
from dataclasses import dataclass, field

from .config import DEFAULT_POLICY
from .errors import LockTimeout
from .util import log


@dataclass
class LockHandle:
    lock_path: str
    owner_dir: str
    acquired_at: float
    mtime: float = 0.0  # last heartbeat written to owner_dir
    released: bool = False
    compromised: bool = False
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _refresher: threading.Thread = field(default=None, repr=False)

    def _refresh(self, interval):
        while not self._stop.wait(interval):
            try:
                if os.stat(self.owner_dir).st_mtime == self.mtime:
                    os.utime(self.owner_dir)
                    self.mtime = os.stat(self.owner_dir).st_mtime
                    continue
            except FileNotFoundError:
                pass
            self.compromised = True
            log(f"Lock {self.owner_dir} was taken over while held", "WARN")
            return

    def start_refresh(self, interval):
        self._refresher = threading.Thread(
            target=self._refresh, args=(interval,), name=f"lock-refresh:{self.lock_path}", daemon=True
        )
        self._refresher.start()

    def stop_refresh(self):
        self._stop.set()
        if self._refresher is not None and self._refresher is not threading.current_thread():
            self._refresher.join()


def _owner_dir(lock_path):
    return lock_path + ".lock"


def _is_stale(owner_dir, stale):
    try:
        age = time.time() - os.stat(owner_dir).st_mtime
    except FileNotFoundError:
        return False
    return age > stale


def _reclaim(owner_dir, stale):
    """Move a stale owner directory aside and delete it; False if we lost a race."""
    grave = f"{owner_dir}.{uuid.uuid4().hex}.stale"
    try:
        os.rename(owner_dir, grave)
    except FileNotFoundError:
        return False
    if not _is_stale(grave, stale):
        # Re-acquired between the check and the rename: hand it back.
        try:
            os.rename(grave, owner_dir)
        except OSError:
            shutil.rmtree(grave, ignore_errors=True)
        return False
    log(f"Reclaiming stale lock {owner_dir}", "WARN")
    shutil.rmtree(grave, ignore_errors=True)
    return True


def _try_acquire(owner_dir, stale):
    try:
        os.mkdir(owner_dir)
        return True
    except FileExistsError:
        pass

    if not _is_stale(owner_dir, stale) or not _reclaim(owner_dir, stale):
        return False
    try:
        os.mkdir(owner_dir)
        return True
    except FileExistsError:
        return False


def acquire(lock_path, policy=DEFAULT_POLICY, sleep=time.sleep):
    """Acquire the lock at ``lock_path`` or raise ``LockTimeout``."""
    if not os.path.exists(lock_path):
        os.makedirs(os.path.dirname(lock_path) or ".", exist_ok=True)
        open(lock_path, "a", encoding="utf-8").close()

    owner_dir = _owner_dir(lock_path)
    delays = policy.delays()
    attempts = 0
    while True:
        attempts += 1
        if _try_acquire(owner_dir, policy.lock_stale):
            mtime = os.stat(owner_dir).st_mtime
            handle = LockHandle(lock_path=lock_path, owner_dir=owner_dir, acquired_at=mtime, mtime=mtime)
            handle.start_refresh(policy.lock_stale / 2)
            return handle
        delay = next(delays, None)
        if delay is None:
            break
        sleep(delay)

    raise LockTimeout(f"Could not acquire lock {lock_path} after {attempts} attempts.")


def release(handle):
    if handle.released:
        return
    handle.released = True
    handle.stop_refresh()
    try:
        current = os.stat(handle.owner_dir).st_mtime
    except FileNotFoundError:
        log(f"Lock {handle.owner_dir} already gone at release", "WARN")
        return
    if handle.compromised or current != handle.mtime:
        # Our lock went stale and another process now owns the directory.
        log(f"Lock {handle.owner_dir} was reclaimed by another process", "WARN")
        return
    shutil.rmtree(handle.owner_dir, ignore_errors=True)


def is_locked(lock_path):
    return os.path.isdir(_owner_dir(lock_path))
