import os

import pytest

from mascot_patch.applier import PatchApplier
from mascot_patch.config import RetryPolicy
from mascot_patch.escalate import PermissionEscalator
from mascot_patch.targets import workbench_targets

ORIGINAL = "(function(){var workbench=1;})();\nconsole.log('boot');"
PAYLOAD = "(function(){console.log('mascot');})();"

FAST = RetryPolicy(lock_retries=2, lock_min_delay=0.001, lock_max_delay=0.001, lock_stale=20.0)


class FakeRunner:
    def __init__(self, ok=True):
        self.ok = ok
        self.commands = []

    def exec(self, command):
        self.commands.append(command)
        return self.ok


class RecordingEscalator(PermissionEscalator):
    def __init__(self, **kwargs):
        kwargs.setdefault("runner", FakeRunner())
        kwargs.setdefault("system", "Linux")
        kwargs.setdefault("policy", FAST)
        super().__init__(**kwargs)
        self.writes = []
        self.creates = []

    def write(self, path, content):
        self.writes.append(path)
        super().write(path, content)

    def create(self, path, content):
        self.creates.append(path)
        super().create(path, content)


def read(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


@pytest.fixture
def app_root(tmp_path):
    return str(tmp_path / "app")


@pytest.fixture
def target(app_root):
    desktop = workbench_targets(app_root)[0]
    write(desktop.asset_path, ORIGINAL)
    return desktop


@pytest.fixture
def lock_dir(tmp_path):
    path = tmp_path / "locks"
    path.mkdir()
    return str(path)


@pytest.fixture
def escalator():
    return RecordingEscalator()


@pytest.fixture
def make_applier(target, lock_dir, escalator):
    def factory(payload=PAYLOAD, **kwargs):
        kwargs.setdefault("escalator", escalator)
        kwargs.setdefault("policy", FAST)
        kwargs.setdefault("lock_dir", lock_dir)
        kwargs.setdefault("version", "1.0.0")
        return PatchApplier(target, lambda: (payload, []), **kwargs)
    return factory
