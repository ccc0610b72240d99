"""Workbench target discovery.

VS Code ships its workbench bundle at different paths depending on whether it
runs as the desktop app or as code-server. The resolver picks the one that
exists and caches it; the rest of the patcher receives that ``Target`` value
and never re-resolves.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .config import LOCK_DIR, LOCK_PREFIX, default_app_root
from .util import log


@dataclass(frozen=True)
class Target:
    name: str
    root: str
    js: str
    bak: str

    @property
    def asset_path(self):
        return os.path.join(self.root, self.js)

    @property
    def backup_path(self):
        return os.path.join(self.root, self.bak)

    @property
    def lock_name(self):
        return f"{LOCK_PREFIX}-{self.name}.lock"

    def lock_path(self, lock_dir=None):
        return os.path.join(lock_dir or LOCK_DIR, self.lock_name)

    def exists(self):
        return os.path.isfile(self.asset_path)


@dataclass(frozen=True)
class HostEnvironment:
    """What the resolver needs to know about the running VS Code."""
    app_root: str
    remote_name: str = ""
    app_name: str = ""

    @classmethod
    def from_env(cls, app_root=None):
        return cls(
            app_root=app_root or default_app_root(),
            remote_name=os.environ.get("VSCODE_REMOTE_NAME", ""),
            app_name=os.environ.get("VSCODE_APP_NAME", ""),
        )

    def runtime_mode(self):
        if self.remote_name == "ssh-remote" or "server" in self.app_name.lower():
            return "server"
        return "desktop"


def workbench_targets(app_root):
    """Candidate targets in priority order."""
    return [
        Target(
            name="desktop",
            root=os.path.join(app_root, "out", "vs", "workbench"),
            js="workbench.desktop.main.js",
            bak="workbench.desktop.main.js.bak",
        ),
        Target(
            name="code-server",
            root=os.path.join(app_root, "out", "vs", "code", "browser", "workbench"),
            js="workbench.js",
            bak="workbench.js.bak",
        ),
    ]


class TargetResolver:
    def __init__(self, env: HostEnvironment):
        self.env = env
        self.candidates = workbench_targets(env.app_root)
        self._selected: Optional[Target] = None

    def _pick(self, name):
        for target in self.candidates:
            if target.name == name and target.exists():
                return target
        return None

    def resolve(self) -> Target:
        if self._selected is not None:
            return self._selected

        selected = None
        if self.env.runtime_mode() == "server":
            selected = self._pick("code-server")
        if selected is None:
            selected = self._pick("desktop") or self._pick("code-server")
        if selected is None:
            # Nothing on disk: still hand back a stable identity for error messages.
            selected = self.candidates[0]
            log(f"No workbench file found under {self.env.app_root}", "WARN")
        else:
            log(f"Workbench target: {selected.name} ({selected.asset_path})", "OK")

        self._selected = selected
        return selected
