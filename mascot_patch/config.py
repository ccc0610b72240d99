import os
import platform
import tempfile
from dataclasses import dataclass


# ─── Identity ───────────────────────────────────────────────────────────────────

EXT_NAME = "vscodeMascot"
# Marker names used by earlier releases; their blocks are stripped on install.
LEGACY_EXT_NAMES = ("backgroundCover",)

LOCK_PREFIX = "vscode-mascot"
LOCK_DIR = os.environ.get("MASCOT_LOCK_DIR") or tempfile.gettempdir()

STATE_DIR = os.environ.get("MASCOT_STATE_DIR") or os.path.join(os.path.expanduser("~"), ".vscode-mascot")
STATE_FILE = os.path.join(STATE_DIR, "state.json")


# ─── VS Code Install Locations ─────────────────────────────────────────────────

DEFAULT_APP_ROOTS = {
    "Linux": "/usr/share/code/resources/app",
    "Darwin": "/Applications/Visual Studio Code.app/Contents/Resources/app",
    "Windows": os.path.join(
        os.environ.get("LOCALAPPDATA", ""), "Programs", "Microsoft VS Code", "resources", "app"
    ),
}


def default_app_root():
    return os.environ.get("VSCODE_APP_ROOT") or DEFAULT_APP_ROOTS.get(platform.system(), "")


# ─── Retry Policy ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RetryPolicy:
    """Timing knobs for lock acquisition and privileged write retries."""
    lock_retries: int = 5
    lock_min_delay: float = 0.1  # seconds before the first retry
    lock_max_delay: float = 2.0
    lock_factor: float = 2.0
    lock_stale: float = 20.0  # lock older than this is presumed abandoned
    write_retry_delay: float = 0.0

    def delays(self):
        """Yield the sleep before each lock retry."""
        delay = self.lock_min_delay
        for _ in range(self.lock_retries):
            yield min(delay, self.lock_max_delay)
            delay *= self.lock_factor


DEFAULT_POLICY = RetryPolicy()
